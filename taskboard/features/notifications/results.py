"""Outcome of a dispatch or delivery attempt."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

NO_EMAIL_ERROR = "User does not have a valid email address"
TRANSPORT_NOT_CONFIGURED_ERROR = "Email transport is not configured"


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    """What a caller learns about a notification.

    ``error`` is set exactly when ``success`` is False; ``sent_at`` only
    when it is True.
    """

    success: bool
    error: str | None = None
    sent_at: datetime | None = None

    @classmethod
    def sent(cls, sent_at: datetime | None = None) -> DeliveryResult:
        return cls(success=True, sent_at=sent_at or datetime.now(UTC))

    @classmethod
    def failed(cls, error: str) -> DeliveryResult:
        return cls(success=False, error=error or "Unknown error")
