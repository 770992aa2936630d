"""Application settings for FastAPI configuration."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """FastAPI application settings.

    Environment variables use APP_ prefix.
    Example: APP_DEBUG=true, APP_BASE_URL="https://tasks.example.com"
    """

    # Service identity
    service_name: str = Field(
        default="taskboard",
        min_length=1,
        max_length=100,
        pattern=r"^[a-z0-9]+(-[a-z0-9]+)*$",
        description="Service name for logging (lowercase, hyphens allowed)",
    )
    title: str = Field(
        default="Taskboard API",
        min_length=1,
        max_length=200,
        description="API title displayed in documentation",
    )
    version: str = Field(
        default="1.0.0",
        pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9]+)?$",
        description="API version (semver format)",
    )
    api_prefix: str = Field(
        default="/api",
        max_length=255,
        pattern=r"^(/.*)?$",
        description="Base URL prefix for API routes",
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # Public URL used to build links in outgoing notifications
    base_url: str = Field(
        default="http://localhost:8000",
        description="Public base URL of the web front-end",
    )

    # Identity header (authentication itself is delegated to the gateway)
    user_header: str = Field(
        default="X-User-Id",
        min_length=1,
        description="Request header carrying the acting user's id",
    )

    # CORS
    cors_origins: list[str] = Field(
        default_factory=list,
        description="Allowed CORS origins (empty = no CORS middleware)",
    )
    cors_allow_credentials: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    def url(self, path: str) -> str:
        """Join a path onto the public base URL."""
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
