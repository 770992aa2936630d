"""Dispatch service: turns an assignment into an attempted email delivery.

Callers always get a :class:`DeliveryResult` back and must carry on
whatever it says; nothing here raises into the task mutation path.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from taskboard.core.services import BaseService
from taskboard.features.notifications.policy import TASK_ASSIGNED_JOB, TASK_ASSIGNED_POLICY
from taskboard.features.notifications.record import NotificationRecord
from taskboard.features.notifications.results import NO_EMAIL_ERROR, DeliveryResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from taskboard.core.settings.email import EmailSettings
    from taskboard.core.settings.queue import QueueSettings
    from taskboard.features.notifications.executor import DeliveryAttemptExecutor
    from taskboard.features.notifications.fallback import FallbackNotifier
    from taskboard.features.tasks.models import Task
    from taskboard.features.users.models import User
    from taskboard.infra.queue import QueueStore


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DispatchService(BaseService):
    """Sends, or enqueues, task assignment emails.

    With a real queue driver the item is pushed and acceptance by the queue
    counts as success; delivery then happens out of band in a worker. With
    the ``sync`` driver the executor runs inline and its outcome is
    returned.

    Example:
        result = await dispatcher.send_assignment(user, task)
        if not result.success:
            response["email_error"] = result.error
    """

    def __init__(
        self,
        executor: DeliveryAttemptExecutor,
        store: QueueStore,
        *,
        fallback: FallbackNotifier,
        queue_settings: QueueSettings,
        email_settings: EmailSettings,
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        super().__init__(logger or logging.getLogger(__name__))
        self.executor = executor
        self.store = store
        self.fallback = fallback
        self.queue_settings = queue_settings
        self.email_settings = email_settings
        self._clock = clock

    async def send_assignment(self, user: User, task: Task) -> DeliveryResult:
        return await self.dispatch(user, task)

    async def send_reassignment(
        self, user: User, task: Task, previous_owner_id: int | None
    ) -> DeliveryResult:
        return await self.dispatch(user, task, previous_owner_id, reassignment=True)

    async def dispatch(
        self,
        recipient: User,
        task: Task,
        previous_owner_id: int | None = None,
        *,
        reassignment: bool | None = None,
    ) -> DeliveryResult:
        """Attempt or enqueue delivery and report the outcome.

        Args:
            recipient: User the task is now assigned to.
            task: The persisted task.
            previous_owner_id: Former owner, for reassignments.
            reassignment: Force the reassignment log wording. Defaults to
                whether ``previous_owner_id`` is given.
        """
        if reassignment is None:
            reassignment = previous_owner_id is not None
        kind = "reassignment" if reassignment else "assignment"

        context: dict[str, Any] = {
            "task_id": task.id,
            "user_id": recipient.id,
            "user_email": recipient.email,
        }
        if reassignment:
            context["previous_user_id"] = previous_owner_id

        if not (recipient.email or "").strip():
            result = DeliveryResult.failed(NO_EMAIL_ERROR)
        else:
            result = await self._deliver(recipient, task, previous_owner_id)

        if result.success:
            self.logger.info(f"Task {kind} email sent successfully", extra=context)
        else:
            self.logger.error(
                f"Failed to send task {kind} email",
                extra={**context, "error": result.error},
            )
            await self._notify_fallback(recipient, task, result.error or "")

        return result

    async def _deliver(
        self, recipient: User, task: Task, previous_owner_id: int | None
    ) -> DeliveryResult:
        try:
            record = NotificationRecord.from_models(recipient, task, previous_owner_id)
            if not self.queue_settings.queue_enabled:
                return await asyncio.wait_for(
                    self.executor.attempt(record), timeout=TASK_ASSIGNED_POLICY.timeout
                )

            await self.store.push(
                TASK_ASSIGNED_JOB,
                record.to_payload(),
                queue=self.queue_settings.default_queue,
            )
        except TimeoutError:
            return DeliveryResult.failed(
                f"Email delivery timed out after {TASK_ASSIGNED_POLICY.timeout:g} seconds"
            )
        except Exception as e:
            return DeliveryResult.failed(str(e) or e.__class__.__name__)

        return DeliveryResult.sent(self._clock())

    async def _notify_fallback(self, recipient: User, task: Task, error: str) -> None:
        try:
            await self.fallback.notify_fallback(recipient, task, error)
        except Exception as e:
            self.logger.error(
                "Fallback notification also failed",
                extra={
                    "task_id": task.id,
                    "user_id": recipient.id,
                    "fallback_error": str(e),
                    "original_error": error,
                },
            )

    def email_status(self) -> dict[str, Any]:
        """Configuration snapshot exposed to administrators."""
        return {
            "configured": self.email_settings.is_configured,
            "driver": self.email_settings.backend or None,
            "from_address": str(self.email_settings.from_address),
            "from_name": self.email_settings.from_name,
            "queue_enabled": self.queue_settings.queue_enabled,
        }
