"""Database access for one-shot CLI commands."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.infra.database import close_database, get_async_session, init_database


@asynccontextmanager
async def cli_database() -> AsyncIterator[None]:
    """Connect (creating tables when enabled) and dispose of the pool on exit.

    Each command runs in its own event loop, so pooled connections must not
    outlive it.
    """
    await init_database()
    try:
        yield
    finally:
        await close_database()


@asynccontextmanager
async def cli_session() -> AsyncIterator[AsyncSession]:
    async with cli_database(), get_async_session() as session:
        yield session
