"""Application lifespan: logging, database, and the email transport report."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from taskboard.core.dependencies.notifications import clear_service_caches
from taskboard.core.settings import (
    get_app_settings,
    get_email_settings,
    get_logging_settings,
    get_queue_settings,
)
from taskboard.infra.database import close_database, init_database
from taskboard.infra.logging import setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


async def _startup_core() -> None:
    """Configure logging before anything else logs."""
    app = get_app_settings()
    setup_logging(log_settings=get_logging_settings(), force=True)
    logger.info(
        "Application starting",
        extra={"service": app.service_name, "version": app.version},
    )


async def _startup_database() -> None:
    try:
        await init_database()
    except Exception as e:
        logger.exception("Database unavailable, failing startup", extra={"error": str(e)})
        raise


def _report_email_transport() -> None:
    email = get_email_settings()
    queue = get_queue_settings()

    if not email.is_configured:
        logger.warning(
            "Email transport is not configured; task notifications will fail",
            extra={"backend": email.backend or None},
        )

    logger.info(
        "Notification delivery mode",
        extra={
            "backend": email.backend or None,
            "queue_driver": queue.driver,
            "queue_enabled": queue.queue_enabled,
        },
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    Startup configures logging, connects to the database (creating tables
    when enabled) and reports how notifications will be delivered.
    Shutdown disposes of the connection pool and the cached notification
    services.
    """
    _ = app

    await _startup_core()
    await _startup_database()
    _report_email_transport()

    app_settings = get_app_settings()
    logger.info(
        "Application startup complete",
        extra={"service": app_settings.service_name, "api_prefix": app_settings.api_prefix},
    )

    yield

    logger.info("Application shutting down", extra={"service": app_settings.service_name})
    await close_database()
    clear_service_caches()
