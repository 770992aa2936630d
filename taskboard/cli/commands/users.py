"""User management commands."""

import click

from taskboard.cli.utils import cli_session, coro, header, info, success, table, yes_no

DEMO_USERS = (
    ("Admin User", "admin@example.com", True),
    ("John Doe", "john@example.com", False),
    ("Jane Smith", "jane@example.com", False),
    ("Bob Johnson", "bob@example.com", False),
)


@click.group(name="users")
def users() -> None:
    """User management commands."""


@users.command(name="seed")
@coro
async def seed() -> None:
    """Create the demo administrator and three regular users.

    Users whose email already exists are left untouched.
    """
    from taskboard.features.users.models import User
    from taskboard.features.users.repository import get_user_repository

    repo = get_user_repository()
    created = 0

    async with cli_session() as session:
        for name, email, is_admin in DEMO_USERS:
            if await repo.find_by_email(session, email) is not None:
                info(f"Skipping {email}: already exists")
                continue
            await repo.create(session, User(name=name, email=email, is_admin=is_admin))
            created += 1
        await session.commit()

    success(f"Seeded {created} user(s)")


@users.command(name="list")
@coro
async def list_users() -> None:
    """List all users."""
    from taskboard.features.users.repository import get_user_repository

    header("User List")
    async with cli_session() as session:
        users_list = await get_user_repository().list(session, limit=1000)

    if not users_list:
        info("No users found")
        return

    table(
        ["ID", "Name", "Email", "Admin"],
        [[u.id, u.name, u.email or "-", yes_no(u.is_admin)] for u in users_list],
    )
    success(f"Total: {len(users_list)} users")
