"""Queue tables: pending work items and terminally failed items."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.core.database import Base, IntegerPKMixin, UTCDateTime


class QueuedJob(Base, IntegerPKMixin):
    """A pending unit of deferred work.

    ``reserved_at`` and ``available_at`` are Unix seconds. A job is
    claimable once ``available_at`` has passed and it is either unreserved
    or its reservation has expired.
    """

    __tablename__ = "jobs"

    queue: Mapped[str] = mapped_column(String(255), index=True)
    job_type: Mapped[str] = mapped_column(String(100), index=True)
    payload: Mapped[str] = mapped_column(Text)
    attempts: Mapped[int] = mapped_column(Integer, default=0)
    reserved_at: Mapped[int | None] = mapped_column(Integer, nullable=True, default=None)
    available_at: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[int] = mapped_column(Integer)

    def __repr__(self) -> str:
        return (
            f"<QueuedJob(id={self.id}, queue={self.queue!r}, job_type={self.job_type!r}, "
            f"attempts={self.attempts})>"
        )


class FailedJob(Base, IntegerPKMixin):
    """A work item that exhausted its attempts."""

    __tablename__ = "failed_jobs"

    uuid: Mapped[str] = mapped_column(
        String(36), unique=True, default=lambda: str(uuid.uuid4())
    )
    queue: Mapped[str] = mapped_column(String(255))
    job_type: Mapped[str] = mapped_column(String(100), index=True)
    payload: Mapped[str] = mapped_column(Text)
    exception: Mapped[str] = mapped_column(Text)
    failed_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=lambda: datetime.now(UTC), index=True
    )

    def __repr__(self) -> str:
        return f"<FailedJob(id={self.id}, job_type={self.job_type!r}, failed_at={self.failed_at})>"
