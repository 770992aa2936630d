"""FastAPI dependencies for the tasks feature.

Example usage:
    @router.get("/tasks")
    async def list_tasks(user: CurrentUser, service: TaskServiceDep) -> list[TaskResponse]:
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from taskboard.core.dependencies.database import SessionDep
from taskboard.core.dependencies.notifications import DispatchServiceDep
from taskboard.features.tasks.service import TaskService


def get_task_service(session: SessionDep, dispatcher: DispatchServiceDep) -> TaskService:
    return TaskService(session, dispatcher)


TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]
