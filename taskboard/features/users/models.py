"""SQLAlchemy models for users."""

from __future__ import annotations

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.core.database import TimestampedBase


class User(TimestampedBase):
    """Application user.

    ``email`` may be empty; such users can own tasks but never receive
    notifications.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="", index=True)
    is_admin: Mapped[bool] = mapped_column(Boolean(), nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r}, is_admin={self.is_admin})>"
