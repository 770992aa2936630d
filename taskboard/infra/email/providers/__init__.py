"""Email transport providers."""

from .base import BaseEmailProvider, EmailDeliveryResult, EmailProvider
from .console import ConsoleProvider
from .factory import PROVIDERS, EmailNotConfiguredError, get_email_provider
from .file import FileProvider
from .smtp import SMTPProvider

__all__ = [
    "PROVIDERS",
    "BaseEmailProvider",
    "ConsoleProvider",
    "EmailDeliveryResult",
    "EmailNotConfiguredError",
    "EmailProvider",
    "FileProvider",
    "SMTPProvider",
    "get_email_provider",
]
