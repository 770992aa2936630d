"""Single delivery attempt for a notification record."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from taskboard.features.notifications.results import (
    TRANSPORT_NOT_CONFIGURED_ERROR,
    DeliveryResult,
)
from taskboard.features.tasks.models import TaskStatus
from taskboard.infra.email import EmailMessage

if TYPE_CHECKING:
    from taskboard.core.settings.app import AppSettings
    from taskboard.core.settings.email import EmailSettings
    from taskboard.features.notifications.record import NotificationRecord
    from taskboard.infra.email import EmailProvider, EmailTemplateRenderer

logger = logging.getLogger(__name__)

TEMPLATE_NAME = "task_assigned"


def format_status(status: str) -> str:
    """``in_progress`` -> ``In progress``."""
    try:
        return TaskStatus(status).label
    except ValueError:
        return status.replace("_", " ").capitalize()


def format_deadline(deadline: datetime) -> str:
    """Render a deadline like ``October 19, 2026 3:04 PM`` (UTC)."""
    value = deadline.astimezone(UTC) if deadline.tzinfo else deadline
    hour = value.hour % 12 or 12
    return f"{value:%B} {value.day}, {value.year} {hour}:{value:%M} {value:%p}"


class DeliveryAttemptExecutor:
    """Renders a record into an email and hands it to the transport once.

    ``attempt`` never raises. Transport and rendering problems come back
    as a failed :class:`DeliveryResult` carrying the error text. Retrying
    is the queue's job.
    """

    def __init__(
        self,
        provider: EmailProvider | None,
        renderer: EmailTemplateRenderer,
        app_settings: AppSettings,
        email_settings: EmailSettings,
    ) -> None:
        self.provider = provider
        self.renderer = renderer
        self.app_settings = app_settings
        self.email_settings = email_settings

    def build_context(self, record: NotificationRecord) -> dict[str, object]:
        task = record.task
        lines = [
            f"Task: {task.title}",
            f"Description: {task.description}",
            f"Status: {format_status(task.status)}",
        ]
        if task.deadline is not None:
            lines.append(f"Deadline: {format_deadline(task.deadline)}")

        return {
            "app_name": self.email_settings.from_name,
            "greeting": f"Hello {record.recipient.name}!",
            "intro": "A new task has been assigned to you.",
            "lines": lines,
            "action_text": "View Task",
            "action_url": self.app_settings.url("/dashboard"),
            "outro": "Please log in to your dashboard to view and update this task.",
        }

    def build_message(self, record: NotificationRecord) -> EmailMessage:
        html, text = self.renderer.render(TEMPLATE_NAME, **self.build_context(record))
        return EmailMessage(
            to=[record.recipient.email],
            subject=f"New Task Assigned: {record.task.title}",
            body_text=text,
            body_html=html,
            template_name=TEMPLATE_NAME,
            metadata={"task_id": record.task.id, "user_id": record.recipient.id},
        )

    async def attempt(self, record: NotificationRecord) -> DeliveryResult:
        if self.provider is None:
            return DeliveryResult.failed(TRANSPORT_NOT_CONFIGURED_ERROR)

        try:
            message = self.build_message(record)
        except Exception as e:
            logger.warning(
                "Could not build task assignment email",
                extra={"task_id": record.task.id, "user_id": record.recipient.id, "error": str(e)},
            )
            return DeliveryResult.failed(str(e))

        try:
            result = await self.provider.send(message)
        except Exception as e:
            return DeliveryResult.failed(str(e))

        if result.success:
            return DeliveryResult.sent(datetime.now(UTC))
        return DeliveryResult.failed(result.error or "Unknown error")
