"""Response schemas for queue monitoring."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from taskboard.infra.queue import FailedJob, QueuedJob


def _from_unix(value: int | None) -> datetime | None:
    return datetime.fromtimestamp(value, tz=UTC) if value is not None else None


def _payload_refs(raw: str) -> dict[str, Any]:
    try:
        payload = json.loads(raw)
    except ValueError:
        return {}
    if not isinstance(payload, dict):
        return {}
    task = payload.get("task")
    recipient = payload.get("recipient")
    task_id = task.get("id") if isinstance(task, dict) else None
    email = recipient.get("email") if isinstance(recipient, dict) else None
    return {
        "task_id": task_id if isinstance(task_id, int) else None,
        "recipient_email": email if isinstance(email, str) else None,
    }


class EmailStatusResponse(BaseModel):
    configured: bool
    driver: str | None
    from_address: str | None
    from_name: str | None
    queue_enabled: bool


class QueueStatsResponse(BaseModel):
    pending_jobs: int = Field(description="Work items waiting or in progress")
    failed_jobs: int = Field(description="Work items that exhausted their attempts")
    email_jobs: int = Field(description="Pending task assignment emails")
    failed_email_jobs: int = Field(description="Failed task assignment emails")
    last_updated: str = Field(description="When the snapshot was taken (ISO 8601)")


class PendingJobResponse(BaseModel):
    id: int
    queue: str
    job_type: str
    attempts: int
    task_id: int | None = None
    recipient_email: str | None = None
    created_at: datetime | None
    available_at: datetime | None
    reserved_at: datetime | None = None

    @classmethod
    def from_job(cls, job: QueuedJob) -> PendingJobResponse:
        return cls(
            id=job.id,
            queue=job.queue,
            job_type=job.job_type,
            attempts=job.attempts,
            created_at=_from_unix(job.created_at),
            available_at=_from_unix(job.available_at),
            reserved_at=_from_unix(job.reserved_at),
            **_payload_refs(job.payload),
        )


class FailedJobResponse(BaseModel):
    id: int
    uuid: str
    queue: str
    job_type: str
    task_id: int | None = None
    recipient_email: str | None = None
    exception: str
    failed_at: datetime

    @classmethod
    def from_job(cls, job: FailedJob) -> FailedJobResponse:
        return cls(
            id=job.id,
            uuid=job.uuid,
            queue=job.queue,
            job_type=job.job_type,
            exception=job.exception,
            failed_at=job.failed_at,
            **_payload_refs(job.payload),
        )
