"""Email infrastructure: message model, transports and template rendering."""

from taskboard.infra.email.providers import (
    BaseEmailProvider,
    EmailDeliveryResult,
    EmailNotConfiguredError,
    EmailProvider,
    get_email_provider,
)
from taskboard.infra.email.schemas import EmailMessage
from taskboard.infra.email.templates import (
    EmailTemplateRenderer,
    TemplateNotFoundError,
    get_template_renderer,
)

__all__ = [
    "BaseEmailProvider",
    "EmailDeliveryResult",
    "EmailMessage",
    "EmailNotConfiguredError",
    "EmailProvider",
    "EmailTemplateRenderer",
    "TemplateNotFoundError",
    "get_email_provider",
    "get_template_renderer",
]
