"""Email template rendering with Jinja2.

Renders HTML and plain text templates that live under the package's
``templates/email`` directory. When only an HTML template exists the
text body is derived from it.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from html import unescape
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

if TYPE_CHECKING:
    from taskboard.core.settings.email import EmailSettings

logger = logging.getLogger(__name__)


class TemplateNotFoundError(Exception):
    """Raised when an email template cannot be found."""


class EmailTemplateRenderer:
    """Jinja2-based email template renderer.

    Example:
        renderer = EmailTemplateRenderer(settings)
        html, text = renderer.render("task_assigned", greeting="Hello Ada!")
    """

    def __init__(self, settings: EmailSettings) -> None:
        self.settings = settings

        package_root = Path(__file__).parent.parent.parent
        self.template_dir = package_root / settings.template_dir

        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["html_to_text"] = self._html_to_text

        logger.debug(
            "Email template renderer initialized",
            extra={"template_dir": str(self.template_dir)},
        )

    def render(self, template_name: str, **context: Any) -> tuple[str | None, str | None]:
        """Render an email template.

        Returns:
            Tuple of (html_content, text_content).

        Raises:
            TemplateNotFoundError: If neither HTML nor text template exists.
        """
        html_content = None
        text_content = None

        try:
            html_content = self.env.get_template(f"{template_name}.html").render(**context)
        except TemplateNotFound:
            logger.debug("No HTML template found", extra={"template": template_name})

        try:
            text_content = self.env.get_template(f"{template_name}.txt").render(**context)
        except TemplateNotFound:
            logger.debug("No text template found", extra={"template": template_name})

        if html_content and not text_content:
            text_content = self._html_to_text(html_content)

        if html_content is None and text_content is None:
            msg = (
                f"No template found for: {template_name} "
                f"(looked for {template_name}.html and {template_name}.txt)"
            )
            raise TemplateNotFoundError(msg)

        return html_content, text_content

    @staticmethod
    def _html_to_text(html: str) -> str:
        """Convert HTML to plain text.

        Links become ``text (url)``, block tags become blank lines and
        remaining tags are stripped.
        """
        html = re.sub(
            r'<a[^>]+href=["\']([^"\']+)["\'][^>]*>([^<]+)</a>',
            r"\2 (\1)",
            html,
            flags=re.IGNORECASE,
        )
        html = re.sub(r"</?(p|div|h[1-6])[^>]*>", r"\n\n", html, flags=re.IGNORECASE)
        html = re.sub(r"<br\s*/?>", r"\n", html, flags=re.IGNORECASE)
        html = re.sub(r"<li[^>]*>", r"\n  * ", html, flags=re.IGNORECASE)
        html = re.sub(r"<[^>]+>", "", html)

        text = unescape(html)
        text = re.sub(r" +", " ", text)
        text = re.sub(r"\n\s*\n", "\n\n", text)
        return text.strip()


@lru_cache(maxsize=1)
def get_template_renderer(settings: EmailSettings | None = None) -> EmailTemplateRenderer:
    """Get cached email template renderer."""
    if settings is None:
        from taskboard.core.settings import get_email_settings

        settings = get_email_settings()
    return EmailTemplateRenderer(settings)
