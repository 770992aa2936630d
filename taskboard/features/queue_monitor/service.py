"""Queue monitoring service with a short-lived statistics cache."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from taskboard.core.services import BaseService
from taskboard.features.notifications.policy import TASK_ASSIGNED_JOB
from taskboard.infra.queue import FailedJobNotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from taskboard.infra.queue import FailedJob, QueuedJob, QueueStore


class QueueOperationError(Exception):
    """An administrative queue operation failed for a reason other than a missing id."""


class QueueMonitor(BaseService):
    """Observes notification work items and performs admin operations on them.

    ``stats`` is cached for ``ttl`` seconds to bound load on the store;
    ``retry`` and ``clear_failed`` invalidate the cache.
    """

    def __init__(
        self,
        store: QueueStore,
        *,
        ttl: float = 30.0,
        job_type: str = TASK_ASSIGNED_JOB,
        clock: Callable[[], float] = time.monotonic,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(logger or logging.getLogger(__name__))
        self.store = store
        self.ttl = ttl
        self.job_type = job_type
        self._clock = clock
        self._cached_stats: dict[str, Any] | None = None
        self._cache_timestamp = 0.0

    async def stats(self, *, force_refresh: bool = False) -> dict[str, Any]:
        if not force_refresh and self._is_cache_valid():
            return dict(self._cached_stats or {})

        stats = {
            "pending_jobs": await self.store.count_pending(),
            "failed_jobs": await self.store.count_failed(),
            "email_jobs": await self.store.count_pending(self.job_type),
            "failed_email_jobs": await self.store.count_failed(self.job_type),
            "last_updated": datetime.now(UTC).isoformat(),
        }
        self._update_cache(stats)
        return dict(stats)

    async def pending_emails(self, limit: int = 20) -> Sequence[QueuedJob]:
        return await self.store.list_pending(self.job_type, limit=limit)

    async def failed_emails(self, limit: int = 20) -> Sequence[FailedJob]:
        return await self.store.list_failed(self.job_type, limit=limit)

    async def retry(self, failed_id: int) -> int:
        """Push a failed item back to pending.

        Raises:
            FailedJobNotFoundError: If ``failed_id`` does not exist.
            QueueOperationError: For any other store failure.
        """
        try:
            job_id = await self.store.retry_failed(failed_id)
        except FailedJobNotFoundError:
            raise
        except Exception as e:
            self.logger.exception("Failed to retry job", extra={"failed_job_id": failed_id})
            raise QueueOperationError(str(e)) from e
        finally:
            self._invalidate_cache()

        self.logger.info(
            "Job retry initiated",
            extra={"failed_job_id": failed_id, "job_id": job_id},
        )
        return job_id

    async def clear_failed(self) -> int:
        """Remove every failed item.

        Raises:
            QueueOperationError: If the store fails.
        """
        try:
            removed = await self.store.flush_failed()
        except Exception as e:
            self.logger.exception("Failed to clear failed jobs")
            raise QueueOperationError(str(e)) from e
        finally:
            self._invalidate_cache()

        self.logger.info("Failed jobs cleared", extra={"removed": removed})
        return removed

    def _is_cache_valid(self) -> bool:
        if self.ttl <= 0 or self._cached_stats is None:
            return False
        return (self._clock() - self._cache_timestamp) < self.ttl

    def _update_cache(self, stats: dict[str, Any]) -> None:
        self._cached_stats = stats
        self._cache_timestamp = self._clock()

    def _invalidate_cache(self) -> None:
        self._cached_stats = None
        self._cache_timestamp = 0.0
