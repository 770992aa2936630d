"""API router for the tasks feature."""

from __future__ import annotations

from fastapi import APIRouter, status

from taskboard.core.dependencies.auth import AdminUser, CurrentUser
from taskboard.core.schemas.problem_details import MessageResponse
from taskboard.features.tasks.dependencies import TaskServiceDep
from taskboard.features.tasks.schemas import (
    TaskCreate,
    TaskMutationResponse,
    TaskResponse,
    TaskUpdate,
)
from taskboard.features.tasks.service import TaskMutation

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _mutation_response(mutation: TaskMutation) -> TaskMutationResponse:
    response = TaskMutationResponse.model_validate(mutation.task)
    return response.model_copy(
        update={
            "email_sent": mutation.email_sent,
            "email_sent_at": mutation.email_sent_at,
            "email_error": mutation.email_error,
        }
    )


@router.get(
    "",
    response_model=list[TaskResponse],
    summary="List tasks",
    description="Administrators see every task; other users see the tasks assigned to them.",
)
async def list_tasks(user: CurrentUser, service: TaskServiceDep) -> list[TaskResponse]:
    tasks = await service.list_visible(user)
    return [TaskResponse.model_validate(task) for task in tasks]


@router.get(
    "/my",
    response_model=list[TaskResponse],
    summary="List my tasks",
)
async def my_tasks(user: CurrentUser, service: TaskServiceDep) -> list[TaskResponse]:
    tasks = await service.list_own(user)
    return [TaskResponse.model_validate(task) for task in tasks]


@router.post(
    "",
    response_model=TaskMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
    description="""
Create a task and email the assigned user.

The task is always created. Whether the email went out is reported in
`email_sent`, `email_sent_at` and `email_error`.
""",
)
async def create_task(
    payload: TaskCreate,
    admin: AdminUser,
    service: TaskServiceDep,
) -> TaskMutationResponse:
    return _mutation_response(await service.create(admin, payload))


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Get a task",
)
async def get_task(task_id: int, user: CurrentUser, service: TaskServiceDep) -> TaskResponse:
    return TaskResponse.model_validate(await service.get_visible(user, task_id))


@router.api_route(
    "/{task_id}",
    methods=["PUT", "PATCH"],
    response_model=TaskMutationResponse,
    summary="Update a task",
    description="Owners may change the status only; administrators may change everything else.",
)
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    user: CurrentUser,
    service: TaskServiceDep,
) -> TaskMutationResponse:
    return _mutation_response(await service.update(user, task_id, payload))


@router.delete(
    "/{task_id}",
    response_model=MessageResponse,
    summary="Delete a task",
)
async def delete_task(task_id: int, admin: AdminUser, service: TaskServiceDep) -> MessageResponse:
    await service.delete(admin, task_id)
    return MessageResponse(message="Task deleted successfully")
