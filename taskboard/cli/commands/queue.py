"""Queue CLI commands.

- Inspect pending and failed notification jobs
- Run a worker
- Retry or flush failed jobs
"""

import asyncio
import contextlib
import signal
import sys
from datetime import UTC, datetime

import click

from taskboard.cli.utils import (
    cli_database,
    coro,
    error,
    header,
    info,
    success,
    table,
    warning,
)
from taskboard.core.dependencies.notifications import get_job_handlers, get_queue_store
from taskboard.core.settings import get_queue_settings
from taskboard.features.queue_monitor.service import QueueMonitor, QueueOperationError
from taskboard.infra.queue import FailedJobNotFoundError, QueueWorker

LIST_LIMIT = 10


def _fmt_unix(value: int | None) -> str:
    if value is None:
        return "-"
    return datetime.fromtimestamp(value, tz=UTC).isoformat(timespec="seconds")


def _truncate(text: str, length: int = 50) -> str:
    first_line = text.strip().splitlines()[0] if text.strip() else ""
    return first_line if len(first_line) <= length else f"{first_line[:length]}..."


def _monitor() -> QueueMonitor:
    # Fresh numbers every time on the command line.
    return QueueMonitor(get_queue_store(), ttl=0)


async def _show_stats(monitor: QueueMonitor) -> None:
    header("Email Queue Statistics")
    stats = await monitor.stats(force_refresh=True)
    table(
        ["Metric", "Count"],
        [
            ["Pending Jobs (Total)", stats["pending_jobs"]],
            ["Failed Jobs (Total)", stats["failed_jobs"]],
            ["Task Assignment Emails (Pending)", stats["email_jobs"]],
            ["Task Assignment Emails (Failed)", stats["failed_email_jobs"]],
        ],
    )


async def _show_pending(monitor: QueueMonitor) -> None:
    header("Pending Email Jobs")
    jobs = await monitor.pending_emails(limit=LIST_LIMIT)
    if not jobs:
        warning("No pending email jobs found.")
        return

    table(
        ["Job ID", "Queue", "Attempts", "Created At", "Available At"],
        [
            [job.id, job.queue, job.attempts, _fmt_unix(job.created_at), _fmt_unix(job.available_at)]
            for job in jobs
        ],
    )


async def _show_failed(monitor: QueueMonitor) -> None:
    header("Failed Email Jobs")
    jobs = await monitor.failed_emails(limit=LIST_LIMIT)
    if not jobs:
        info("No failed email jobs found.")
        return

    table(
        ["Job ID", "Queue", "Exception", "Failed At"],
        [
            [job.id, job.queue, _truncate(job.exception), job.failed_at.isoformat(timespec="seconds")]
            for job in jobs
        ],
    )


@click.group(name="queue")
def queue() -> None:
    """Notification queue commands."""


@queue.command(name="emails")
@click.option("--stats", "show_stats", is_flag=True, help="Show queue statistics only")
@click.option("--pending", "show_pending", is_flag=True, help="Show only pending jobs")
@click.option("--failed", "show_failed", is_flag=True, help="Show only failed jobs")
@coro
async def emails(show_stats: bool, show_pending: bool, show_failed: bool) -> None:
    """View email queue status and the newest pending and failed jobs."""
    monitor = _monitor()

    async with cli_database():
        if show_stats:
            await _show_stats(monitor)
        elif show_failed:
            await _show_failed(monitor)
        elif show_pending:
            await _show_pending(monitor)
        else:
            await _show_stats(monitor)
            await _show_pending(monitor)
            await _show_failed(monitor)


@queue.command(name="work")
@click.option(
    "--queue",
    "queues",
    multiple=True,
    help="Queue to process (repeatable; default: QUEUE_DEFAULT_QUEUE)",
)
@click.option("--once", is_flag=True, help="Process a single job and exit")
@click.option("--max-jobs", type=int, default=None, help="Exit after processing this many jobs")
@click.option("--stop-when-empty", is_flag=True, help="Exit once every queue is empty")
@coro
async def work(
    queues: tuple[str, ...],
    once: bool,
    max_jobs: int | None,
    stop_when_empty: bool,
) -> None:
    """Run a queue worker delivering notification emails."""
    settings = get_queue_settings()
    try:
        worker = QueueWorker(
            get_queue_store(),
            get_job_handlers(),
            queues=queues or (settings.default_queue,),
            sleep=settings.worker_sleep,
            retry_after=settings.retry_after,
        )
    except ValueError as e:
        error(f"Invalid queue configuration: {e}")
        sys.exit(1)

    async with cli_database():
        if once:
            result = await worker.run_once()
            if result is None:
                info("No jobs available.")
            else:
                info(f"Job {result.job_id} ({result.job_type}): {result.outcome}")
            return

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(sig, worker.stop)

        info(f"Worker listening on: {', '.join(worker.queues)}")
        processed = await worker.run(max_jobs=max_jobs, stop_when_empty=stop_when_empty)
        success(f"Worker stopped after {processed} job(s)")


@queue.command(name="retry")
@click.argument("job_id", type=int)
@coro
async def retry(job_id: int) -> None:
    """Push failed job JOB_ID back onto its queue."""
    async with cli_database():
        try:
            new_id = await _monitor().retry(job_id)
        except FailedJobNotFoundError as e:
            error(str(e))
            sys.exit(1)
        except QueueOperationError as e:
            error(f"Failed to retry job: {e}")
            sys.exit(1)

    success(f"Job retry initiated successfully (new job {new_id})")


@queue.command(name="flush")
@click.confirmation_option(prompt="Delete all failed jobs?")
@coro
async def flush() -> None:
    """Delete every failed job."""
    async with cli_database():
        try:
            cleared = await _monitor().clear_failed()
        except QueueOperationError as e:
            error(f"Failed to clear failed jobs: {e}")
            sys.exit(1)

    success(f"All failed jobs cleared successfully ({cleared} removed)")
