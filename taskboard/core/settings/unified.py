"""Unified settings composition for convenient access.

Usage:
    from taskboard.core.settings import get_settings

    settings = get_settings()
    print(settings.queue.driver)
    print(settings.email.from_address)
"""

from __future__ import annotations

from dataclasses import dataclass

from .app import AppSettings
from .database import DatabaseSettings
from .email import EmailSettings
from .logs import LoggingSettings
from .queue import QueueSettings


@dataclass(frozen=True)
class Settings:
    """All settings domains, each still loaded from its own env prefix."""

    app: AppSettings
    db: DatabaseSettings
    email: EmailSettings
    queue: QueueSettings
    logging: LoggingSettings
