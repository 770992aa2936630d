"""Queue-layer exceptions."""

from __future__ import annotations


class QueueError(Exception):
    """Base exception for queue store and worker errors."""


class FailedJobNotFoundError(QueueError):
    """Raised when a failed job id does not exist."""

    def __init__(self, job_id: int | str) -> None:
        self.job_id = job_id
        super().__init__(f"Failed job {job_id} not found")


class JobTimeoutError(QueueError):
    """Raised when a handler exceeds its per-attempt timeout."""

    def __init__(self, job_id: int, timeout: float) -> None:
        self.job_id = job_id
        self.timeout = timeout
        super().__init__(f"Job {job_id} exceeded timeout of {timeout:g}s")


class UnknownJobTypeError(QueueError):
    """Raised when no handler is registered for a job type."""

    def __init__(self, job_type: str) -> None:
        self.job_type = job_type
        super().__init__(f"No handler registered for job type '{job_type}'")
