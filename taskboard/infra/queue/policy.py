"""Per-job-type retry policy."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Fixed retry schedule for one kind of work item.

    Attributes:
        max_attempts: Total attempts, including the first.
        backoff: Delay in seconds before each retry; ``backoff[n - 1]`` is
            used after the n-th failed attempt and the last entry repeats.
        timeout: Per-attempt execution limit in seconds.
    """

    max_attempts: int
    backoff: tuple[int, ...]
    timeout: float

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            msg = "max_attempts must be at least 1"
            raise ValueError(msg)
        if self.timeout <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)

    def should_retry(self, attempts: int) -> bool:
        """Whether an item that has failed ``attempts`` times gets another try."""
        return attempts < self.max_attempts

    def delay_for(self, attempts: int) -> int:
        """Seconds to wait after the ``attempts``-th failed attempt."""
        if not self.backoff:
            return 0
        index = min(max(attempts, 1), len(self.backoff)) - 1
        return self.backoff[index]

