"""SQLAlchemy models for the tasks feature."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskboard.core.database import TimestampedBase, UTCDateTime
from taskboard.features.users.models import User


class TaskStatus(StrEnum):
    """Lifecycle states a task owner can move a task through."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @property
    def label(self) -> str:
        """Human form used in emails, e.g. ``In progress``."""
        return self.value.replace("_", " ").capitalize()


class Task(TimestampedBase):
    """Task assigned to exactly one user."""

    __tablename__ = "tasks"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text(), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TaskStatus.PENDING.value
    )
    deadline: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    user: Mapped[User] = relationship(User, lazy="selectin")

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title={self.title!r}, status={self.status!r}, user_id={self.user_id})>"
