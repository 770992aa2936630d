"""Secondary notification channel used after primary delivery fails."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from taskboard.features.tasks.models import Task
    from taskboard.features.users.models import User


@runtime_checkable
class FallbackNotifier(Protocol):
    """Best-effort alternative to email (SMS, webhook, push, ...).

    Implementations may raise; the dispatcher logs and discards the error.
    """

    async def notify_fallback(self, recipient: User, task: Task, error: str) -> None: ...


class LoggingFallbackNotifier:
    """Default fallback that only records that a fallback was attempted."""

    method = "log_only"

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(__name__)

    async def notify_fallback(self, recipient: User, task: Task, error: str) -> None:
        self.logger.warning(
            "Attempting fallback notification method",
            extra={"task_id": task.id, "user_id": recipient.id, "original_error": error},
        )
        self.logger.info(
            "Fallback notification method attempted",
            extra={"task_id": task.id, "user_id": recipient.id, "method": self.method},
        )
