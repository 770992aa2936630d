"""Email provider selection from settings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .console import ConsoleProvider
from .file import FileProvider
from .smtp import SMTPProvider

if TYPE_CHECKING:
    from taskboard.core.settings.email import EmailSettings

    from .base import BaseEmailProvider

logger = logging.getLogger(__name__)

PROVIDERS: dict[str, type[BaseEmailProvider]] = {
    "smtp": SMTPProvider,
    "console": ConsoleProvider,
    "file": FileProvider,
}


class EmailNotConfiguredError(Exception):
    """Raised when no usable email transport is configured."""


def get_email_provider(settings: EmailSettings | None = None) -> BaseEmailProvider:
    """Build the provider selected by ``EMAIL_BACKEND``.

    Raises:
        EmailNotConfiguredError: If the backend is empty or SMTP has no host.
    """
    if settings is None:
        from taskboard.core.settings import get_email_settings

        settings = get_email_settings()

    provider_cls = PROVIDERS.get(settings.backend)
    if provider_cls is None:
        msg = "Email transport is not configured (EMAIL_BACKEND is empty)"
        raise EmailNotConfiguredError(msg)

    try:
        provider = provider_cls(settings)
    except ValueError as e:
        raise EmailNotConfiguredError(str(e)) from e

    logger.debug("Email provider selected", extra={"provider": provider.provider_name})
    return provider


__all__ = ["PROVIDERS", "EmailNotConfiguredError", "get_email_provider"]
