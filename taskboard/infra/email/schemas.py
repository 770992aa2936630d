"""Email message model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, EmailStr, Field


class EmailMessage(BaseModel):
    """Email message ready for a transport.

    Example:
        message = EmailMessage(
            to=["user@example.com"],
            subject="New Task Assigned: Write report",
            body_text="Hello Ada!",
            body_html="<p>Hello Ada!</p>",
        )
    """

    to: list[EmailStr] = Field(min_length=1, description="Primary recipients")
    reply_to: EmailStr | None = Field(default=None, description="Reply-to address")

    # Sender (optional, uses settings default if not provided)
    from_email: EmailStr | None = Field(default=None, description="Sender email address")
    from_name: str | None = Field(default=None, max_length=100, description="Sender display name")

    subject: str = Field(min_length=1, max_length=500, description="Email subject line")
    body_text: str | None = Field(default=None, description="Plain text body")
    body_html: str | None = Field(default=None, description="HTML body")

    headers: dict[str, str] = Field(default_factory=dict, description="Additional email headers")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Custom metadata for tracking")
    template_name: str | None = Field(
        default=None,
        description="Template name used to generate this email",
    )

    def model_post_init(self, __context: Any) -> None:
        """Validate that at least one body type is provided."""
        if self.body_text is None and self.body_html is None:
            msg = "Either body_text or body_html must be provided"
            raise ValueError(msg)

    @property
    def all_recipients(self) -> list[str]:
        return list(self.to)
