"""Database-backed job queue: store, worker and retry policy."""

from taskboard.infra.queue.exceptions import (
    FailedJobNotFoundError,
    JobTimeoutError,
    QueueError,
    UnknownJobTypeError,
)
from taskboard.infra.queue.handlers import JobHandler
from taskboard.infra.queue.models import FailedJob, QueuedJob
from taskboard.infra.queue.policy import RetryPolicy
from taskboard.infra.queue.store import ClaimedJob, QueueStore, unix_now
from taskboard.infra.queue.worker import JobOutcome, ProcessedJob, QueueWorker

__all__ = [
    "ClaimedJob",
    "FailedJob",
    "FailedJobNotFoundError",
    "JobHandler",
    "JobOutcome",
    "JobTimeoutError",
    "ProcessedJob",
    "QueueError",
    "QueueStore",
    "QueueWorker",
    "QueuedJob",
    "RetryPolicy",
    "UnknownJobTypeError",
    "unix_now",
]
