"""Repository for users."""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from taskboard.core.database import BaseRepository
from taskboard.features.users.models import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class UserRepository(BaseRepository[User]):
    """User-specific queries beyond basic CRUD."""

    async def find_by_email(self, session: AsyncSession, email: str) -> User | None:
        return await self.get_by(session, User.email, email)


@lru_cache
def get_user_repository() -> UserRepository:
    return UserRepository(User)
