"""API router for users.

Identity comes from the request header, so there are no credentials to
manage here; administrators maintain the user list that tasks are
assigned from.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, status
from sqlalchemy import delete

from taskboard.core.dependencies.auth import AdminUser, CurrentUser
from taskboard.core.dependencies.database import SessionDep
from taskboard.core.exceptions import (
    BadRequestException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from taskboard.core.schemas.problem_details import MessageResponse
from taskboard.features.tasks.models import Task
from taskboard.features.users.models import User
from taskboard.features.users.repository import get_user_repository
from taskboard.features.users.schemas import UserCreate, UserResponse, UserUpdate

router = APIRouter(tags=["users"])

logger = logging.getLogger(__name__)


async def _get_or_404(session: SessionDep, user_id: int) -> User:
    user = await get_user_repository().get(session, user_id)
    if user is None:
        raise NotFoundException(
            detail=f"User {user_id} not found",
            type="user-not-found",
            extra={"user_id": user_id},
        )
    return user


async def _ensure_email_free(
    session: SessionDep, email: str, *, ignore_id: int | None = None
) -> None:
    existing = await get_user_repository().find_by_email(session, email)
    if existing is not None and existing.id != ignore_id:
        raise ValidationException(
            detail="The email has already been taken.",
            extra={"field": "email"},
        )


@router.get("/user", response_model=UserResponse, summary="Current user")
async def current_user(user: CurrentUser) -> UserResponse:
    return UserResponse.model_validate(user)


@router.get("/users", response_model=list[UserResponse], summary="List users")
async def list_users(_: AdminUser, session: SessionDep) -> list[UserResponse]:
    users = await get_user_repository().list(session, limit=1000)
    return [UserResponse.model_validate(user) for user in users]


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
)
async def create_user(payload: UserCreate, admin: AdminUser, session: SessionDep) -> UserResponse:
    await _ensure_email_free(session, payload.email)

    user = await get_user_repository().create(
        session,
        User(name=payload.name, email=payload.email, is_admin=payload.is_admin),
    )
    await session.commit()

    logger.info("User created", extra={"user_id": user.id, "created_by": admin.id})
    return UserResponse.model_validate(user)


@router.get("/users/{user_id}", response_model=UserResponse, summary="Get a user")
async def get_user(user_id: int, user: CurrentUser, session: SessionDep) -> UserResponse:
    if not user.is_admin and user.id != user_id:
        raise ForbiddenException(detail="Unauthorized", extra={"user_id": user.id})
    return UserResponse.model_validate(await _get_or_404(session, user_id))


@router.put("/users/{user_id}", response_model=UserResponse, summary="Update a user")
async def update_user(
    user_id: int,
    payload: UserUpdate,
    _: AdminUser,
    session: SessionDep,
) -> UserResponse:
    user = await _get_or_404(session, user_id)
    await _ensure_email_free(session, payload.email, ignore_id=user.id)

    user.name = payload.name
    user.email = payload.email
    if payload.is_admin is not None:
        user.is_admin = payload.is_admin

    await session.commit()
    await session.refresh(user)
    return UserResponse.model_validate(user)


@router.delete("/users/{user_id}", response_model=MessageResponse, summary="Delete a user")
async def delete_user(user_id: int, admin: AdminUser, session: SessionDep) -> MessageResponse:
    user = await _get_or_404(session, user_id)
    if user.id == admin.id:
        raise BadRequestException(detail="Cannot delete yourself", extra={"user_id": admin.id})

    # Tasks go with their owner.
    await session.execute(delete(Task).where(Task.user_id == user.id))
    await get_user_repository().delete(session, user)
    await session.commit()

    return MessageResponse(message="User deleted successfully")
