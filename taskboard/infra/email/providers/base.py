"""Base email provider protocol and abstract class.

Usage:
    class MyProvider(BaseEmailProvider):
        @property
        def provider_name(self) -> str:
            return "mine"

        async def _do_send(self, message: EmailMessage) -> EmailDeliveryResult:
            ...
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from taskboard.core.settings.email import EmailSettings
    from taskboard.infra.email.schemas import EmailMessage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailDeliveryResult:
    """Result of an email delivery attempt.

    Attributes:
        success: Whether delivery succeeded
        message_id: Provider-assigned message ID (for tracking)
        provider: Provider name (smtp, console, file)
        recipients_accepted: List of accepted recipients
        recipients_rejected: List of rejected recipients
        error: Error message if failed
        error_code: Error category for programmatic handling
        duration_ms: Time taken to send in milliseconds
        metadata: Provider-specific metadata
    """

    success: bool
    message_id: str | None
    provider: str
    recipients_accepted: list[str] = field(default_factory=list)
    recipients_rejected: list[str] = field(default_factory=list)
    error: str | None = None
    error_code: str | None = None
    duration_ms: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.success and not self.error:
            object.__setattr__(self, "error", "Unknown error")

    @classmethod
    def success_result(
        cls,
        message_id: str,
        provider: str,
        recipients: list[str] | None = None,
        duration_ms: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> EmailDeliveryResult:
        """Create a successful delivery result."""
        return cls(
            success=True,
            message_id=message_id,
            provider=provider,
            recipients_accepted=recipients or [],
            duration_ms=duration_ms,
            metadata=metadata or {},
        )

    @classmethod
    def failure_result(
        cls,
        provider: str,
        error: str,
        error_code: str | None = None,
        recipients_rejected: list[str] | None = None,
        duration_ms: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> EmailDeliveryResult:
        """Create a failed delivery result."""
        return cls(
            success=False,
            message_id=None,
            provider=provider,
            recipients_rejected=recipients_rejected or [],
            error=error,
            error_code=error_code,
            duration_ms=duration_ms,
            metadata=metadata or {},
        )


@runtime_checkable
class EmailProvider(Protocol):
    """Protocol defining the email provider interface.

    Using Protocol allows duck typing and easier testing.
    """

    async def send(self, message: EmailMessage) -> EmailDeliveryResult: ...

    @property
    def provider_name(self) -> str: ...


class BaseEmailProvider(ABC):
    """Abstract base class for email providers.

    Wraps ``_do_send`` with timing, logging and error handling so that
    ``send`` never raises; any exception becomes a failed result.
    """

    def __init__(self, settings: EmailSettings) -> None:
        self._settings = settings

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get the provider name."""
        ...

    @abstractmethod
    async def _do_send(self, message: EmailMessage) -> EmailDeliveryResult:
        """Implement the actual sending logic."""
        ...

    @property
    def settings(self) -> EmailSettings:
        return self._settings

    def _sender(self, message: EmailMessage) -> tuple[str, str | None]:
        """Resolve the (address, display name) pair for the From header."""
        from_email = message.from_email or self._settings.from_address
        from_name = message.from_name or self._settings.from_name or None
        return str(from_email), from_name

    async def send(self, message: EmailMessage) -> EmailDeliveryResult:
        """Send an email with timing and error handling.

        Outcomes are logged at DEBUG only; callers own the delivery event.
        """
        start_time = time.perf_counter()

        try:
            result = await self._do_send(message)
        except Exception as e:
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            logger.debug(
                f"Unexpected error in {self.provider_name} provider",
                exc_info=True,
                extra={
                    "provider": self.provider_name,
                    "error": str(e),
                    "duration_ms": duration_ms,
                },
            )
            return EmailDeliveryResult.failure_result(
                provider=self.provider_name,
                error=str(e),
                error_code="UNEXPECTED_ERROR",
                duration_ms=duration_ms,
            )

        if result.duration_ms is None:
            result = replace(result, duration_ms=int((time.perf_counter() - start_time) * 1000))

        if result.success:
            logger.debug(
                f"Email sent via {self.provider_name}",
                extra={
                    "message_id": result.message_id,
                    "provider": self.provider_name,
                    "recipients": len(result.recipients_accepted),
                    "duration_ms": result.duration_ms,
                },
            )
        else:
            logger.debug(
                f"Email send failed via {self.provider_name}",
                extra={
                    "provider": self.provider_name,
                    "error": result.error,
                    "error_code": result.error_code,
                    "duration_ms": result.duration_ms,
                },
            )
        return result


__all__ = [
    "BaseEmailProvider",
    "EmailDeliveryResult",
    "EmailProvider",
]
