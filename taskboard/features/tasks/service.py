"""Task business rules: who may see and change what, and when to notify."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from taskboard.core.exceptions import (
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from taskboard.core.services import BaseService
from taskboard.features.tasks.models import Task, TaskStatus
from taskboard.features.tasks.repository import TaskRepository, get_task_repository
from taskboard.features.users.repository import UserRepository, get_user_repository

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from sqlalchemy.ext.asyncio import AsyncSession

    from taskboard.features.notifications.dispatch import DispatchService
    from taskboard.features.notifications.results import DeliveryResult
    from taskboard.features.tasks.schemas import TaskCreate, TaskUpdate
    from taskboard.features.users.models import User


@dataclass(slots=True)
class TaskMutation:
    """A persisted task plus what happened to its notification."""

    task: Task
    email_sent: bool = False
    email_sent_at: datetime | None = None
    email_error: str | None = None

    @classmethod
    def from_result(cls, task: Task, result: DeliveryResult) -> TaskMutation:
        return cls(
            task=task,
            email_sent=result.success,
            email_sent_at=result.sent_at,
            email_error=None if result.success else result.error,
        )


class TaskService(BaseService):
    """Orchestrates task operations for an acting user.

    Task state is always committed before a notification is dispatched, so
    an email problem can only ever degrade the response, never the data.
    """

    def __init__(
        self,
        session: AsyncSession,
        dispatcher: DispatchService,
        repository: TaskRepository | None = None,
        users: UserRepository | None = None,
    ) -> None:
        super().__init__()
        self._session = session
        self._dispatcher = dispatcher
        self._repository = repository or get_task_repository()
        self._users = users or get_user_repository()

    async def list_visible(self, actor: User) -> Sequence[Task]:
        """Administrators see every task, everyone else only their own."""
        if actor.is_admin:
            return await self._repository.list_all(self._session)
        return await self._repository.list_for_user(self._session, actor.id)

    async def list_own(self, actor: User) -> Sequence[Task]:
        tasks = await self._repository.list_for_user(self._session, actor.id)
        self.logger.info(
            f"User {actor.id} requested their tasks",
            extra={"user_id": actor.id, "count": len(tasks)},
        )
        return tasks

    async def get_visible(self, actor: User, task_id: int) -> Task:
        """Fetch a task the actor may look at.

        Raises:
            NotFoundException: If the task does not exist.
            ForbiddenException: If the actor neither owns it nor is an admin.
        """
        task = await self._get_or_404(task_id)
        if not actor.is_admin and task.user_id != actor.id:
            raise ForbiddenException(
                detail="Unauthorized", extra={"task_id": task_id, "user_id": actor.id}
            )
        return task

    async def create(self, actor: User, payload: TaskCreate) -> TaskMutation:
        """Create a pending task and notify its owner."""
        owner = await self._require_user(payload.user_id)

        task = Task(
            title=payload.title,
            description=payload.description,
            deadline=payload.deadline,
            status=TaskStatus.PENDING.value,
            user=owner,
        )
        self._session.add(task)
        await self._session.commit()
        await self._session.refresh(task)

        self.logger.info(
            "Task created",
            extra={"task_id": task.id, "user_id": owner.id, "created_by": actor.id},
        )

        result = await self._dispatcher.send_assignment(owner, task)
        return TaskMutation.from_result(task, result)

    async def update(self, actor: User, task_id: int, payload: TaskUpdate) -> TaskMutation:
        """Apply an update under the ownership rules.

        The owner may only move the status. Administrators may change every
        other field but not the status. Moving the task to another user
        sends that user a reassignment email.

        Raises:
            NotFoundException: If the task does not exist.
            ForbiddenException: If the actor may not make this change.
            ValidationException: If the payload is unusable for the actor.
        """
        task = await self._get_or_404(task_id)
        is_owner = task.user_id == actor.id

        if not actor.is_admin and not is_owner:
            raise ForbiddenException(
                detail="Unauthorized", extra={"task_id": task_id, "user_id": actor.id}
            )

        if actor.is_admin and "status" in payload.model_fields_set:
            raise ForbiddenException(
                detail="Admins cannot update task status",
                extra={"task_id": task_id, "user_id": actor.id},
            )

        if not actor.is_admin:
            return await self._update_status(task, payload)

        return await self._update_fields(actor, task, payload)

    async def delete(self, actor: User, task_id: int) -> None:
        task = await self._get_or_404(task_id)
        await self._repository.delete(self._session, task)
        await self._session.commit()
        self.logger.info("Task deleted", extra={"task_id": task_id, "deleted_by": actor.id})

    async def _update_status(self, task: Task, payload: TaskUpdate) -> TaskMutation:
        if payload.status is None:
            raise ValidationException(
                detail="The status field is required.", extra={"field": "status"}
            )

        task.status = payload.status.value
        await self._session.commit()
        await self._session.refresh(task)

        self.logger.info(
            "Task status updated",
            extra={"task_id": task.id, "user_id": task.user_id, "status": task.status},
        )
        return TaskMutation(task=task)

    async def _update_fields(self, actor: User, task: Task, payload: TaskUpdate) -> TaskMutation:
        changes = payload.changes()
        previous_owner_id = task.user_id
        new_owner: User | None = None

        if "user_id" in changes:
            new_owner = await self._require_user(changes.pop("user_id"))
            task.user = new_owner

        for field, value in changes.items():
            setattr(task, field, value)

        await self._session.commit()
        await self._session.refresh(task)

        self.logger.info(
            "Task updated",
            extra={
                "task_id": task.id,
                "updated_by": actor.id,
                "fields": sorted(payload.model_fields_set - {"status"}),
            },
        )

        if new_owner is None or new_owner.id == previous_owner_id:
            return TaskMutation(task=task)

        result = await self._dispatcher.send_reassignment(new_owner, task, previous_owner_id)
        return TaskMutation.from_result(task, result)

    async def _get_or_404(self, task_id: int) -> Task:
        task = await self._repository.get(self._session, task_id)
        if task is None:
            raise NotFoundException(
                detail=f"Task {task_id} not found",
                type="task-not-found",
                extra={"task_id": task_id},
            )
        return task

    async def _require_user(self, user_id: int) -> User:
        user = await self._users.get(self._session, user_id)
        if user is None:
            raise ValidationException(
                detail="The selected user id is invalid.",
                extra={"field": "user_id", "value": user_id},
            )
        return user
