"""Base service class for business logic."""

from __future__ import annotations

import logging


class BaseService:
    """Base class for service classes.

    Provides ``self.logger``, named after the concrete class unless a
    logger is passed in explicitly.

    Example:
        class TaskService(BaseService):
            async def create(self, payload):
                self.logger.info("Task created", extra={"task_id": task.id})
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(self.__class__.__name__)
