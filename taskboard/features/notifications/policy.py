"""Retry schedule for task assignment emails.

The schedule is fixed rather than exponential: a second attempt 60s after
the first failure, a third 180s after the second. The 360s entry is the
window after which an item would be retried again if the attempt cap
were raised.
"""

from __future__ import annotations

from taskboard.infra.queue.policy import RetryPolicy

TASK_ASSIGNED_JOB = "task_assigned"
TASK_ASSIGNED_MAX_ATTEMPTS = 3
TASK_ASSIGNED_BACKOFF: tuple[int, ...] = (60, 180, 360)
TASK_ASSIGNED_TIMEOUT = 30

TASK_ASSIGNED_POLICY = RetryPolicy(
    max_attempts=TASK_ASSIGNED_MAX_ATTEMPTS,
    backoff=TASK_ASSIGNED_BACKOFF,
    timeout=TASK_ASSIGNED_TIMEOUT,
)
