"""Modular Pydantic Settings v2 configuration.

Each domain has its own frozen settings model and environment prefix:
APP_, DB_, EMAIL_, QUEUE_, LOG_. Import settings via the cached loaders:

    from taskboard.core.settings import get_email_settings

Or use unified settings for convenient access to all domains:

    from taskboard.core.settings import get_settings

    settings = get_settings()
    print(settings.queue.queue_enabled)
"""

from __future__ import annotations

from .loader import (
    clear_all_caches,
    get_app_settings,
    get_db_settings,
    get_email_settings,
    get_logging_settings,
    get_queue_settings,
    get_settings,
)
from .unified import Settings

__all__ = [
    "Settings",
    "clear_all_caches",
    "get_app_settings",
    "get_db_settings",
    "get_email_settings",
    "get_logging_settings",
    "get_queue_settings",
    "get_settings",
]
