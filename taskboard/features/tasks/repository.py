"""Repository for tasks."""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from sqlalchemy import select

from taskboard.core.database import BaseRepository
from taskboard.features.tasks.models import Task

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession


class TaskRepository(BaseRepository[Task]):
    """Task queries beyond basic CRUD.

    The owner relationship is ``selectin`` loaded, so results are safe to
    serialize after the session closes.
    """

    async def list_all(self, session: AsyncSession) -> Sequence[Task]:
        result = await session.execute(select(Task).order_by(Task.id))
        return result.scalars().all()

    async def list_for_user(self, session: AsyncSession, user_id: int) -> Sequence[Task]:
        stmt = select(Task).where(Task.user_id == user_id).order_by(Task.id)
        result = await session.execute(stmt)
        return result.scalars().all()


@lru_cache
def get_task_repository() -> TaskRepository:
    return TaskRepository(Task)
