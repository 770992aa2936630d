"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the
process.

Testing:
    In tests, clear the cache to force reload:
    get_queue_settings.cache_clear()

    Or build instances directly:
    settings = QueueSettings(driver="sync")
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .database import DatabaseSettings
from .email import EmailSettings
from .logs import LoggingSettings
from .queue import QueueSettings
from .unified import Settings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()


@lru_cache(maxsize=1)
def get_db_settings() -> DatabaseSettings:
    """Get cached database settings."""
    return DatabaseSettings()


@lru_cache(maxsize=1)
def get_email_settings() -> EmailSettings:
    """Get cached email settings."""
    return EmailSettings()


@lru_cache(maxsize=1)
def get_queue_settings() -> QueueSettings:
    """Get cached queue settings."""
    return QueueSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings."""
    return LoggingSettings()


def clear_all_caches() -> None:
    """Clear all settings caches.

    Useful for testing or when you need to force reload settings.
    """
    get_app_settings.cache_clear()
    get_db_settings.cache_clear()
    get_email_settings.cache_clear()
    get_queue_settings.cache_clear()
    get_logging_settings.cache_clear()
    get_settings.cache_clear()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached unified settings."""
    return Settings(
        app=get_app_settings(),
        db=get_db_settings(),
        email=get_email_settings(),
        queue=get_queue_settings(),
        logging=get_logging_settings(),
    )
