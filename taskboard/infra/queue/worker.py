"""Queue worker: claims work items and drives them through their retry policy.

Item lifecycle:
    pending -> reserved -> deleted (success)
                        -> pending again after backoff (attempts < max)
                        -> failed_jobs (attempts exhausted or no handler)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from taskboard.infra.logging import remove_from_log_context, set_log_context
from taskboard.infra.queue.exceptions import JobTimeoutError, UnknownJobTypeError
from taskboard.infra.queue.store import unix_now

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from taskboard.infra.queue.handlers import JobHandler
    from taskboard.infra.queue.store import ClaimedJob, QueueStore

logger = logging.getLogger(__name__)


class JobOutcome(StrEnum):
    """What happened to a claimed item."""

    SUCCEEDED = "succeeded"
    RELEASED = "released"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ProcessedJob:
    job_id: int
    job_type: str
    attempts: int
    outcome: JobOutcome
    error: str | None = None


class QueueWorker:
    """Pulls work items from one or more queues and runs their handlers.

    Attempts on a single item are strictly sequential; the store's claim
    guarantees no other worker holds the same item concurrently.

    Example:
        worker = QueueWorker(store, [TaskAssignedJobHandler(executor)])
        await worker.run(stop_when_empty=True)
    """

    def __init__(
        self,
        store: QueueStore,
        handlers: Iterable[JobHandler],
        *,
        queues: Iterable[str] = ("default",),
        sleep: float = 3.0,
        retry_after: int = 90,
        clock: Callable[[], int] = unix_now,
    ) -> None:
        self.store = store
        self.handlers = {handler.job_type: handler for handler in handlers}

        longest = max((h.policy.timeout for h in self.handlers.values()), default=0)
        if retry_after <= longest:
            msg = f"retry_after ({retry_after}s) must exceed the longest handler timeout ({longest}s)"
            raise ValueError(msg)

        self.queues = tuple(queues)
        self.sleep = sleep
        self.retry_after = retry_after
        self._clock = clock
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def stop(self) -> None:
        """Ask ``run`` to exit after the current item."""
        self._running = False

    async def run_once(self) -> ProcessedJob | None:
        """Claim and process at most one item. Returns None when queues are idle."""
        for queue in self.queues:
            job = await self.store.claim(queue, now=self._clock(), retry_after=self.retry_after)
            if job is not None:
                return await self._process(job)
        return None

    async def run(self, *, max_jobs: int | None = None, stop_when_empty: bool = False) -> int:
        """Process items until stopped.

        Args:
            max_jobs: Stop after this many items.
            stop_when_empty: Stop as soon as every queue is idle.

        Returns:
            Number of items processed.
        """
        self._running = True
        processed = 0
        logger.info(
            "Queue worker started",
            extra={"queues": list(self.queues), "job_types": sorted(self.handlers)},
        )

        try:
            while self._running:
                if max_jobs is not None and processed >= max_jobs:
                    break

                try:
                    result = await self.run_once()
                except asyncio.CancelledError:
                    raise
                except Exception:
                    logger.exception("Error in queue worker loop")
                    await asyncio.sleep(self.sleep)
                    continue

                if result is None:
                    if stop_when_empty:
                        break
                    await asyncio.sleep(self.sleep)
                    continue

                processed += 1
        finally:
            self._running = False
            logger.info("Queue worker stopped", extra={"processed": processed})

        return processed

    async def _process(self, job: ClaimedJob) -> ProcessedJob:
        set_log_context(job_id=job.id, job_type=job.job_type)
        try:
            handler = self.handlers.get(job.job_type)
            if handler is None:
                exc = UnknownJobTypeError(job.job_type)
                await self.store.fail(job, exc)
                logger.error(
                    "No handler registered for job type",
                    extra={"job_id": job.id, "job_type": job.job_type},
                )
                return ProcessedJob(job.id, job.job_type, job.attempts, JobOutcome.FAILED, str(exc))

            try:
                await self._execute(handler, job)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                return await self._handle_failure(handler, job, exc)

            await self.store.delete(job)
            logger.info(
                "Job processed",
                extra={"job_id": job.id, "job_type": job.job_type, "attempts": job.attempts},
            )
            return ProcessedJob(job.id, job.job_type, job.attempts, JobOutcome.SUCCEEDED)
        finally:
            remove_from_log_context("job_id", "job_type")

    async def _execute(self, handler: JobHandler, job: ClaimedJob) -> None:
        timeout = handler.policy.timeout
        try:
            await asyncio.wait_for(handler.handle(job.payload), timeout=timeout)
        except TimeoutError as e:
            raise JobTimeoutError(job.id, timeout) from e

    async def _handle_failure(
        self, handler: JobHandler, job: ClaimedJob, exc: Exception
    ) -> ProcessedJob:
        policy = handler.policy

        if policy.should_retry(job.attempts):
            delay = policy.delay_for(job.attempts)
            await self.store.release(job, delay, now=self._clock())
            logger.warning(
                "Job attempt failed, will retry",
                extra={
                    "job_id": job.id,
                    "job_type": job.job_type,
                    "attempts": job.attempts,
                    "max_attempts": policy.max_attempts,
                    "retry_in": delay,
                    "error": str(exc),
                },
            )
            return ProcessedJob(job.id, job.job_type, job.attempts, JobOutcome.RELEASED, str(exc))

        if await self.store.fail(job, exc) is None:
            return ProcessedJob(job.id, job.job_type, job.attempts, JobOutcome.FAILED, str(exc))

        logger.error(
            "Job failed after exhausting attempts",
            extra={
                "job_id": job.id,
                "job_type": job.job_type,
                "attempts": job.attempts,
                "error": str(exc),
            },
        )
        try:
            await handler.failed(job.payload, exc)
        except Exception:
            logger.exception(
                "Job failure callback raised",
                extra={"job_id": job.id, "job_type": job.job_type},
            )
        return ProcessedJob(job.id, job.job_type, job.attempts, JobOutcome.FAILED, str(exc))
