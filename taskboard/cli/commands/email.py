"""Email notification CLI commands.

- Show the email transport configuration
- Send a real task assignment email to check the whole path
"""

import logging
import sys
from typing import Any

import click

from taskboard.cli.utils import (
    cli_session,
    coro,
    error,
    header,
    info,
    success,
    table,
    warning,
    yes_no,
)
from taskboard.core.dependencies.notifications import build_delivery_executor, get_queue_store
from taskboard.core.settings import get_email_settings, get_queue_settings
from taskboard.features.notifications.dispatch import DispatchService
from taskboard.features.notifications.fallback import LoggingFallbackNotifier

logger = logging.getLogger(__name__)


def build_dispatcher(*, inline: bool = False) -> DispatchService:
    """Dispatcher for CLI use. ``inline`` delivers synchronously whatever the queue driver."""
    queue_settings = get_queue_settings()
    if inline:
        queue_settings = queue_settings.model_copy(update={"driver": "sync"})

    return DispatchService(
        build_delivery_executor(),
        get_queue_store(),
        fallback=LoggingFallbackNotifier(),
        queue_settings=queue_settings,
        email_settings=get_email_settings(),
    )


def print_status(status: dict[str, Any]) -> None:
    table(
        ["Setting", "Value"],
        [
            ["Configured", yes_no(status["configured"])],
            ["Driver", status["driver"] or "-"],
            ["From Address", status["from_address"]],
            ["From Name", status["from_name"]],
            ["Queue Enabled", yes_no(status["queue_enabled"])],
        ],
    )


@click.group(name="email")
def email() -> None:
    """Email notification commands."""


@email.command(name="status")
def status() -> None:
    """Show the email transport configuration."""
    header("Email Service Configuration")
    print_status(build_dispatcher().email_status())


@email.command(name="test")
@click.option("--user-id", type=int, default=None, help="Test with a specific user ID")
@click.option("--dry-run", is_flag=True, help="Check configuration without sending email")
@coro
async def test_email(user_id: int | None, dry_run: bool) -> None:
    """Send a task assignment email through the configured transport.

    A throwaway task is created for the user, the notification is delivered
    inline, and the task is deleted again.

    Examples:
    \b
      taskboard email test --dry-run
      taskboard email test --user-id 2
    """
    from taskboard.features.tasks.models import Task, TaskStatus
    from taskboard.features.users.repository import get_user_repository

    header("Testing Email Service Configuration")
    status = build_dispatcher().email_status()
    print_status(status)

    if not status["configured"]:
        error("Email service is not properly configured!")
        info("Check the EMAIL_* settings in your environment or .env file.")
        sys.exit(1)

    success("Email service appears to be configured correctly.")

    async with cli_session() as session:
        users = get_user_repository()
        if user_id is not None:
            user = await users.get(session, user_id)
            if user is None:
                error(f"User with ID {user_id} not found.")
                sys.exit(1)
        else:
            first = await users.list(session, limit=1)
            if not first:
                error("No users found in database.")
                sys.exit(1)
            user = first[0]

        info(f"Testing with user: {user.name} ({user.email})")

        if dry_run:
            warning("DRY RUN MODE - No emails will be sent")
            info("Email service configuration appears valid.")
            return

        task = Task(
            title="Test Task - Email Service Test",
            description="This is a test task created by the email test command.",
            status=TaskStatus.PENDING.value,
            user=user,
        )
        session.add(task)
        await session.commit()
        await session.refresh(task)
        info("Created test task for email testing...")

        try:
            result = await build_dispatcher(inline=True).send_assignment(user, task)
        finally:
            await session.delete(task)
            await session.commit()
            info("Cleaned up test task.")

    if not result.success:
        error("Test email failed to send!")
        error(f"Error: {result.error}")
        logger.error(
            "Email test command failed",
            extra={"user_id": user.id, "user_email": user.email, "error": result.error},
        )
        sys.exit(1)

    success("Test email sent successfully!")
    if result.sent_at is not None:
        info(f"Sent at: {result.sent_at.isoformat()}")
    success("Email service test completed successfully!")
