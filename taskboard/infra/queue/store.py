"""Database-backed work-item store.

Every mutation runs in its own transaction. Claiming is a compare-and-set
on ``reserved_at`` so two workers never hold the same item at once, and
delete/release/fail only act while the caller still holds the reservation
it claimed.
"""

from __future__ import annotations

import json
import logging
import time
import traceback
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, or_, select, update

from taskboard.infra.queue.exceptions import FailedJobNotFoundError
from taskboard.infra.queue.models import FailedJob, QueuedJob

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)

# Candidates examined per claim; losing a race just moves on to the next one
_CLAIM_BATCH = 5


def unix_now() -> int:
    return int(time.time())


@dataclass(frozen=True, slots=True)
class ClaimedJob:
    """Snapshot of a work item reserved by a worker."""

    id: int
    queue: str
    job_type: str
    payload: dict[str, Any]
    attempts: int
    raw_payload: str
    reserved_at: int


def format_exception(exc: BaseException) -> str:
    """Render an exception with its traceback for the failed_jobs table."""
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).strip()


def _still_reserved(job: ClaimedJob) -> ColumnElement[bool]:
    # attempts grows on every claim, so together with reserved_at it names one reservation
    return (QueuedJob.reserved_at == job.reserved_at) & (QueuedJob.attempts == job.attempts)


def _owned(rowcount: int, job: ClaimedJob, action: str) -> bool:
    if rowcount == 1:
        return True
    logger.warning(
        "Job reservation lost before %s",
        action,
        extra={"job_id": job.id, "job_type": job.job_type, "attempts": job.attempts},
    )
    return False


class QueueStore:
    """Durable, at-least-once queue over the ``jobs`` and ``failed_jobs`` tables.

    Example:
        store = QueueStore(AsyncSessionLocal)
        job_id = await store.push("task_assigned", {"task": {...}})
        claimed = await store.claim("default", retry_after=90)
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def push(
        self,
        job_type: str,
        payload: dict[str, Any],
        *,
        queue: str = "default",
        delay: int = 0,
        now: int | None = None,
    ) -> int:
        """Enqueue a work item and return its id."""
        now = unix_now() if now is None else now
        job = QueuedJob(
            queue=queue,
            job_type=job_type,
            payload=json.dumps(payload, default=str),
            attempts=0,
            reserved_at=None,
            available_at=now + max(delay, 0),
            created_at=now,
        )
        async with self._session_factory() as session, session.begin():
            session.add(job)
            await session.flush()
            job_id = job.id

        logger.debug(
            "Job pushed",
            extra={"job_id": job_id, "job_type": job_type, "queue": queue, "delay": delay},
        )
        return job_id

    async def claim(
        self,
        queue: str = "default",
        *,
        now: int | None = None,
        retry_after: int = 90,
    ) -> ClaimedJob | None:
        """Reserve the oldest available item on ``queue``.

        Increments ``attempts`` as part of the reservation. Items whose
        reservation is older than ``retry_after`` seconds count as abandoned
        and may be claimed again.
        """
        now = unix_now() if now is None else now
        expired = now - retry_after
        claimable = (
            (QueuedJob.queue == queue)
            & (QueuedJob.available_at <= now)
            & or_(QueuedJob.reserved_at.is_(None), QueuedJob.reserved_at <= expired)
        )

        async with self._session_factory() as session:
            result = await session.execute(
                select(QueuedJob.id).where(claimable).order_by(QueuedJob.id).limit(_CLAIM_BATCH)
            )
            candidates = list(result.scalars())

        for job_id in candidates:
            async with self._session_factory() as session, session.begin():
                updated = await session.execute(
                    update(QueuedJob)
                    .where(QueuedJob.id == job_id, claimable)
                    .values(reserved_at=now, attempts=QueuedJob.attempts + 1)
                    .execution_options(synchronize_session=False)
                )
                if updated.rowcount != 1:
                    continue
                row = (
                    await session.execute(select(QueuedJob).where(QueuedJob.id == job_id))
                ).scalar_one()
                return ClaimedJob(
                    id=row.id,
                    queue=row.queue,
                    job_type=row.job_type,
                    payload=json.loads(row.payload),
                    attempts=row.attempts,
                    raw_payload=row.payload,
                    reserved_at=now,
                )
        return None

    async def delete(self, job: ClaimedJob) -> bool:
        """Remove a completed item. Returns False if the reservation was lost."""
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                delete(QueuedJob)
                .where(QueuedJob.id == job.id, _still_reserved(job))
                .execution_options(synchronize_session=False)
            )
        return _owned(result.rowcount, job, "delete")

    async def release(self, job: ClaimedJob, delay: int, *, now: int | None = None) -> bool:
        """Return a reserved item to the queue, available after ``delay`` seconds.

        Returns False if the reservation was lost to another worker.
        """
        now = unix_now() if now is None else now
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                update(QueuedJob)
                .where(QueuedJob.id == job.id, _still_reserved(job))
                .values(reserved_at=None, available_at=now + max(delay, 0))
                .execution_options(synchronize_session=False)
            )
        return _owned(result.rowcount, job, "release")

    async def fail(
        self,
        job: ClaimedJob,
        exception: BaseException | str,
        *,
        failed_at: datetime | None = None,
    ) -> int | None:
        """Move a reserved item to ``failed_jobs`` and return the failed id.

        Returns None, writing nothing, if the reservation was lost to
        another worker.
        """
        detail = exception if isinstance(exception, str) else format_exception(exception)
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                delete(QueuedJob)
                .where(QueuedJob.id == job.id, _still_reserved(job))
                .execution_options(synchronize_session=False)
            )
            if not _owned(result.rowcount, job, "fail"):
                return None

            failed = FailedJob(
                uuid=str(uuid.uuid4()),
                queue=job.queue,
                job_type=job.job_type,
                payload=job.raw_payload,
                exception=detail,
                failed_at=failed_at or datetime.now(UTC),
            )
            session.add(failed)
            await session.flush()
            failed_id = failed.id

        logger.debug(
            "Job moved to failed store",
            extra={"job_id": job.id, "failed_job_id": failed_id, "job_type": job.job_type},
        )
        return failed_id

    async def retry_failed(self, failed_id: int, *, now: int | None = None) -> int:
        """Push a failed item back onto its queue with a fresh attempt count.

        Raises:
            FailedJobNotFoundError: If ``failed_id`` does not exist.
        """
        now = unix_now() if now is None else now
        async with self._session_factory() as session, session.begin():
            failed = await session.get(FailedJob, failed_id)
            if failed is None:
                raise FailedJobNotFoundError(failed_id)

            job = QueuedJob(
                queue=failed.queue,
                job_type=failed.job_type,
                payload=failed.payload,
                attempts=0,
                reserved_at=None,
                available_at=now,
                created_at=now,
            )
            session.add(job)
            await session.delete(failed)
            await session.flush()
            job_id = job.id

        logger.info(
            "Failed job pushed back onto queue",
            extra={"failed_job_id": failed_id, "job_id": job_id},
        )
        return job_id

    async def flush_failed(self) -> int:
        """Delete every failed item and return how many were removed."""
        async with self._session_factory() as session, session.begin():
            result = await session.execute(delete(FailedJob))
        return result.rowcount or 0

    async def count_pending(self, job_type: str | None = None) -> int:
        stmt = select(func.count()).select_from(QueuedJob)
        if job_type is not None:
            stmt = stmt.where(QueuedJob.job_type == job_type)
        async with self._session_factory() as session:
            return (await session.execute(stmt)).scalar_one()

    async def count_failed(self, job_type: str | None = None) -> int:
        stmt = select(func.count()).select_from(FailedJob)
        if job_type is not None:
            stmt = stmt.where(FailedJob.job_type == job_type)
        async with self._session_factory() as session:
            return (await session.execute(stmt)).scalar_one()

    async def list_pending(
        self, job_type: str | None = None, limit: int = 20
    ) -> Sequence[QueuedJob]:
        """Newest pending items first."""
        stmt = select(QueuedJob).order_by(QueuedJob.created_at.desc(), QueuedJob.id.desc())
        if job_type is not None:
            stmt = stmt.where(QueuedJob.job_type == job_type)
        async with self._session_factory() as session:
            return (await session.execute(stmt.limit(limit))).scalars().all()

    async def list_failed(
        self, job_type: str | None = None, limit: int = 20
    ) -> Sequence[FailedJob]:
        """Most recently failed items first."""
        stmt = select(FailedJob).order_by(FailedJob.failed_at.desc(), FailedJob.id.desc())
        if job_type is not None:
            stmt = stmt.where(FailedJob.job_type == job_type)
        async with self._session_factory() as session:
            return (await session.execute(stmt.limit(limit))).scalars().all()
