"""API router for email status and queue monitoring (administrators only)."""

from __future__ import annotations

from fastapi import APIRouter, Query

from taskboard.core.dependencies.auth import AdminUser
from taskboard.core.dependencies.notifications import DispatchServiceDep, QueueMonitorDep
from taskboard.core.exceptions import NotFoundException, QueueOperationException
from taskboard.core.schemas.problem_details import MessageResponse
from taskboard.features.queue_monitor.schemas import (
    EmailStatusResponse,
    FailedJobResponse,
    PendingJobResponse,
    QueueStatsResponse,
)
from taskboard.features.queue_monitor.service import QueueOperationError
from taskboard.infra.queue import FailedJobNotFoundError

router = APIRouter(tags=["queue"])


@router.get(
    "/email-status",
    response_model=EmailStatusResponse,
    summary="Email configuration status",
)
async def email_status(_: AdminUser, dispatcher: DispatchServiceDep) -> EmailStatusResponse:
    return EmailStatusResponse(**dispatcher.email_status())


@router.get(
    "/queue/stats",
    response_model=QueueStatsResponse,
    summary="Queue statistics",
    description="Counts of pending and failed work items, cached for a short time.",
)
async def queue_stats(_: AdminUser, monitor: QueueMonitorDep) -> QueueStatsResponse:
    return QueueStatsResponse(**await monitor.stats())


@router.get(
    "/queue/pending-emails",
    response_model=list[PendingJobResponse],
    summary="Most recent pending notification jobs",
)
async def pending_emails(
    _: AdminUser,
    monitor: QueueMonitorDep,
    limit: int = Query(default=20, ge=1, le=100),
) -> list[PendingJobResponse]:
    jobs = await monitor.pending_emails(limit=limit)
    return [PendingJobResponse.from_job(job) for job in jobs]


@router.get(
    "/queue/failed-emails",
    response_model=list[FailedJobResponse],
    summary="Most recent failed notification jobs",
)
async def failed_emails(
    _: AdminUser,
    monitor: QueueMonitorDep,
    limit: int = Query(default=20, ge=1, le=100),
) -> list[FailedJobResponse]:
    jobs = await monitor.failed_emails(limit=limit)
    return [FailedJobResponse.from_job(job) for job in jobs]


@router.post(
    "/queue/retry/{job_id}",
    response_model=MessageResponse,
    summary="Retry a failed job",
    description=(
        "Push a failed job back onto its queue with a fresh attempt count. "
        "Returns 404 when no failed job has this id and 500 with a message "
        "when the queue store cannot complete the retry."
    ),
    responses={404: {"description": "Failed job not found"}},
)
async def retry_job(job_id: int, _: AdminUser, monitor: QueueMonitorDep) -> MessageResponse:
    try:
        await monitor.retry(job_id)
    except FailedJobNotFoundError as e:
        raise NotFoundException(
            detail=str(e), type="failed-job-not-found", extra={"job_id": job_id}
        ) from e
    except QueueOperationError as e:
        raise QueueOperationException(detail=f"Failed to retry job: {e}") from e
    return MessageResponse(message="Job retry initiated successfully")


@router.delete(
    "/queue/failed-jobs",
    response_model=MessageResponse,
    summary="Clear all failed jobs",
)
async def clear_failed_jobs(_: AdminUser, monitor: QueueMonitorDep) -> MessageResponse:
    try:
        await monitor.clear_failed()
    except QueueOperationError as e:
        raise QueueOperationException(detail=f"Failed to clear failed jobs: {e}") from e
    return MessageResponse(message="All failed jobs cleared successfully")
