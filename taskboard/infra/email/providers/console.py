"""Console email provider for development.

Writes emails to the log instead of sending them.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from .base import BaseEmailProvider, EmailDeliveryResult

if TYPE_CHECKING:
    from taskboard.infra.email.schemas import EmailMessage

logger = logging.getLogger(__name__)

_PREVIEW_CHARS = 500


class ConsoleProvider(BaseEmailProvider):
    """Console email provider. Always succeeds."""

    @property
    def provider_name(self) -> str:
        return "console"

    async def _do_send(self, message: EmailMessage) -> EmailDeliveryResult:
        message_id = f"console-{uuid.uuid4()}"
        from_email, from_name = self._sender(message)

        separator = "=" * 60
        lines = [
            "",
            separator,
            "EMAIL (Console Backend - Development Mode)",
            separator,
            f"Message-ID: {message_id}",
            f"From: {from_name} <{from_email}>" if from_name else f"From: {from_email}",
            f"To: {', '.join(message.to)}",
            f"Subject: {message.subject}",
            separator,
        ]

        if message.body_text:
            lines.append("TEXT BODY:")
            lines.append(message.body_text[:_PREVIEW_CHARS])
            if len(message.body_text) > _PREVIEW_CHARS:
                lines.append(f"... ({len(message.body_text) - _PREVIEW_CHARS} more characters)")

        lines.extend([separator, ""])
        logger.info("\n".join(lines), extra={"message_id": message_id})

        return EmailDeliveryResult.success_result(
            message_id=message_id,
            provider=self.provider_name,
            recipients=message.all_recipients,
            metadata={"mode": "development"},
        )


__all__ = ["ConsoleProvider"]
