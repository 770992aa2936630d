"""Database dependencies for FastAPI route handlers.

Use ``get_db_session`` in route handlers; use
``taskboard.infra.database.get_async_session`` in CLI commands and workers.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.infra.database import get_async_session


async def get_db_session() -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency for a request-scoped database session."""
    async with get_async_session() as session:
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_db_session)]
