"""File email provider for testing.

Writes each email as a JSON file in the configured directory.
File format: {timestamp}_{message_id}.json
"""

from __future__ import annotations

import asyncio
import json
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from .base import BaseEmailProvider, EmailDeliveryResult

if TYPE_CHECKING:
    from taskboard.core.settings.email import EmailSettings
    from taskboard.infra.email.schemas import EmailMessage

class FileProvider(BaseEmailProvider):
    """File email provider.

    Example:
        provider = FileProvider(settings)
        result = await provider.send(message)
        result.metadata["file_path"]  # /tmp/taskboard_emails/20241202_120000_..._file-abc.json
    """

    def __init__(self, settings: EmailSettings) -> None:
        super().__init__(settings)
        self._output_dir = Path(settings.file_path)

    @property
    def provider_name(self) -> str:
        return "file"

    async def _do_send(self, message: EmailMessage) -> EmailDeliveryResult:
        message_id = f"file-{uuid.uuid4()}"
        now = datetime.now(UTC)
        filepath = self._output_dir / f"{now.strftime('%Y%m%d_%H%M%S_%f')}_{message_id}.json"
        from_email, from_name = self._sender(message)

        email_data = {
            "message_id": message_id,
            "timestamp": now.isoformat(),
            "provider": self.provider_name,
            "from_email": from_email,
            "from_name": from_name,
            "to": list(message.to),
            "reply_to": message.reply_to,
            "subject": message.subject,
            "body_text": message.body_text,
            "body_html": message.body_html,
            "headers": message.headers,
            "metadata": message.metadata,
            "template_name": message.template_name,
        }

        try:
            await asyncio.to_thread(self._write, filepath, email_data)
        except OSError as e:
            return EmailDeliveryResult.failure_result(
                provider=self.provider_name,
                error=f"Failed to write email file: {e}",
                error_code="FILE_WRITE_ERROR",
            )

        return EmailDeliveryResult.success_result(
            message_id=message_id,
            provider=self.provider_name,
            recipients=message.all_recipients,
            metadata={"file_path": str(filepath)},
        )

    def _write(self, filepath: Path, data: dict) -> None:
        self._output_dir.mkdir(parents=True, exist_ok=True)
        filepath.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")


__all__ = ["FileProvider"]
