"""Queue handler for task assignment emails."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from taskboard.features.notifications.policy import TASK_ASSIGNED_JOB, TASK_ASSIGNED_POLICY
from taskboard.features.notifications.record import NotificationRecord

if TYPE_CHECKING:
    from taskboard.features.notifications.executor import DeliveryAttemptExecutor

logger = logging.getLogger(__name__)


class DeliveryFailedError(Exception):
    """A delivery attempt returned a failed result."""


class TaskAssignedJobHandler:
    """Runs one delivery attempt per claimed ``task_assigned`` work item."""

    job_type = TASK_ASSIGNED_JOB
    policy = TASK_ASSIGNED_POLICY

    def __init__(self, executor: DeliveryAttemptExecutor) -> None:
        self.executor = executor

    async def handle(self, payload: dict[str, Any]) -> None:
        """Raise :class:`DeliveryFailedError` so the attempt counts as failed."""
        record = NotificationRecord.from_payload(payload)
        result = await self.executor.attempt(record)
        if not result.success:
            raise DeliveryFailedError(result.error or "Unknown error")

    async def failed(self, payload: dict[str, Any], exc: BaseException) -> None:
        task = payload.get("task", {})
        logger.error(
            "Task assignment email failed after all retries",
            extra={
                "task_id": task.get("id"),
                "task_title": task.get("title"),
                "error": str(exc),
            },
            exc_info=(type(exc), exc, exc.__traceback__),
        )
