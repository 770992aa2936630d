"""Work queue settings.

Environment variables use QUEUE_ prefix.
Example: QUEUE_DRIVER=sync
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

QueueDriver = Literal["sync", "database"]


class QueueSettings(BaseSettings):
    """Deferred work configuration.

    ``sync`` runs notification delivery inline with the request; ``database``
    stores work items in the ``jobs`` table for ``taskboard queue work``.
    """

    driver: QueueDriver = Field(
        default="database",
        description="Queue driver: 'sync' (inline) or 'database' (worker processes)",
    )
    default_queue: str = Field(
        default="default",
        min_length=1,
        max_length=100,
        description="Queue name used when none is given",
    )
    worker_sleep: float = Field(
        default=3.0,
        ge=0.0,
        le=60.0,
        description="Seconds a worker sleeps when the queue is empty",
    )
    retry_after: int = Field(
        default=90,
        ge=1,
        le=86400,
        description="Seconds before a reserved item may be claimed again; must exceed every handler timeout",
    )
    stats_cache_ttl: float = Field(
        default=30.0,
        ge=0.0,
        le=3600.0,
        description="Seconds queue statistics are cached (0 disables caching)",
    )

    model_config = SettingsConfigDict(
        env_prefix="QUEUE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def queue_enabled(self) -> bool:
        """Whether delivery is deferred to queue workers."""
        return self.driver != "sync"
