"""Database engine and session management."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from taskboard.core.database import Base
from taskboard.core.settings import get_app_settings, get_db_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

db_settings = get_db_settings()
app_settings = get_app_settings()

engine = create_async_engine(
    db_settings.url,
    echo=db_settings.echo or app_settings.debug,
    pool_pre_ping=not db_settings.is_sqlite,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Get async database session.

    Example:
        async with get_async_session() as session:
            result = await session.execute(select(User))
            users = result.scalars().all()
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


def _import_models() -> None:
    """Register every mapped table on Base.metadata."""
    import taskboard.features.tasks.models  # noqa: F401
    import taskboard.features.users.models  # noqa: F401
    import taskboard.infra.queue.models  # noqa: F401


async def init_database() -> None:
    """Verify connectivity and create missing tables.

    Raises:
        Exception: If the database cannot be reached.
    """
    logger.info("Initializing database connection", extra={"url": engine.url.render_as_string()})

    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if db_settings.create_tables:
                _import_models()
                await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        logger.error(
            "Failed to connect to database",
            extra={"url": engine.url.render_as_string(), "error": str(e)},
        )
        raise

    logger.info("Database connection established successfully")


async def close_database() -> None:
    """Dispose of the engine's connection pool."""
    logger.info("Closing database connection")

    try:
        await engine.dispose()
        logger.info("Database connection closed successfully")
    except Exception as e:
        logger.exception("Error closing database connection", extra={"error": str(e)})


__all__ = [
    "AsyncSessionLocal",
    "close_database",
    "engine",
    "get_async_session",
    "init_database",
]
