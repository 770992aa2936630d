"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from taskboard.core.settings import get_app_settings
from taskboard.features.queue_monitor.router import router as queue_router
from taskboard.features.tasks.router import router as tasks_router
from taskboard.features.users.router import router as users_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from taskboard.core.settings.app import AppSettings

logger = logging.getLogger(__name__)


def setup_routers(app: FastAPI, app_settings: AppSettings | None = None) -> None:
    """Register all feature routers under the API prefix."""
    app_settings = app_settings or get_app_settings()
    api_prefix = app_settings.api_prefix

    app.include_router(users_router, prefix=api_prefix)
    app.include_router(tasks_router, prefix=api_prefix)
    app.include_router(queue_router, prefix=api_prefix)

    logger.debug("Routers registered", extra={"api_prefix": api_prefix})
