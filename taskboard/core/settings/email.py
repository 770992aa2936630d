"""Email transport settings.

Environment variables use EMAIL_ prefix.
Example: EMAIL_BACKEND=smtp, EMAIL_SMTP_HOST=smtp.example.com
"""

from __future__ import annotations

from pathlib import Path
from tempfile import gettempdir
from typing import Literal

from pydantic import EmailStr, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_EMAIL_FILE_DIR = Path(gettempdir()) / "taskboard_emails"


class EmailSettings(BaseSettings):
    """Email transport configuration.

    Supports multiple backends:
    - smtp: Standard SMTP/SMTPS delivery
    - console: Log emails through the logging system (development)
    - file: Write emails to JSON files (testing)

    An empty backend means email is not configured at all.
    """

    # Backend selection
    backend: Literal["smtp", "console", "file", ""] = Field(
        default="smtp",
        description="Email backend: smtp (production), console (dev), file (testing)",
    )

    # SMTP Configuration
    smtp_host: str = Field(
        default="",
        max_length=255,
        description="SMTP server hostname",
    )
    smtp_port: int = Field(
        default=587,
        ge=1,
        le=65535,
        description="SMTP server port (587 for TLS, 465 for SSL, 25 for plain)",
    )
    smtp_username: str | None = Field(
        default=None,
        max_length=255,
        description="SMTP authentication username",
    )
    smtp_password: SecretStr | None = Field(
        default=None,
        description="SMTP authentication password",
    )

    # TLS/SSL Configuration
    use_tls: bool = Field(
        default=True,
        description="Use STARTTLS (port 587). Set False for SSL (port 465) or plain (port 25)",
    )
    use_ssl: bool = Field(
        default=False,
        description="Use implicit SSL/TLS (port 465). Mutually exclusive with use_tls",
    )
    validate_certs: bool = Field(
        default=True,
        description="Validate SSL/TLS certificates",
    )
    timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="SMTP connection timeout in seconds",
    )

    # Sender Configuration
    from_address: EmailStr = Field(
        default="noreply@example.com",
        description="Default sender email address",
    )
    from_name: str = Field(
        default="Taskboard",
        max_length=100,
        description="Default sender display name",
    )

    # Templates
    template_dir: str = Field(
        default="templates/email",
        description="Directory containing email templates (relative to package root)",
    )

    # File Backend Settings (for testing)
    file_path: str = Field(
        default=str(DEFAULT_EMAIL_FILE_DIR),
        description="Directory for file backend to write emails",
    )

    model_config = SettingsConfigDict(
        env_prefix="EMAIL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_tls_ssl_exclusive(self) -> EmailSettings:
        """Ensure TLS and SSL are mutually exclusive."""
        if self.use_tls and self.use_ssl:
            msg = "use_tls and use_ssl are mutually exclusive"
            raise ValueError(msg)
        return self

    @property
    def is_configured(self) -> bool:
        """Check if email is properly configured for sending.

        SMTP needs both a host and a username; the other backends only need
        to be selected.
        """
        if not self.backend:
            return False
        if self.backend == "smtp":
            return bool(self.smtp_host) and bool(self.smtp_username)
        return True

    def get_smtp_url(self) -> str:
        """Get SMTP URL for debugging (without password)."""
        scheme = "smtps" if self.use_ssl else "smtp"
        auth = f"{self.smtp_username}@" if self.smtp_username else ""
        return f"{scheme}://{auth}{self.smtp_host}:{self.smtp_port}"
