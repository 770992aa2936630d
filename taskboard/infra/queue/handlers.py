"""Contract between the queue worker and job-type specific code."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from taskboard.infra.queue.policy import RetryPolicy


@runtime_checkable
class JobHandler(Protocol):
    """Executes one kind of work item.

    ``handle`` signals a failed attempt by raising. ``failed`` is called
    once, after the item has been moved to the failed store.
    """

    job_type: str
    policy: RetryPolicy

    async def handle(self, payload: dict[str, Any]) -> None: ...

    async def failed(self, payload: dict[str, Any], exc: BaseException) -> None: ...
