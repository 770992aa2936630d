"""Pydantic schemas for the tasks feature."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from taskboard.features.tasks.models import TaskStatus


class UserSummary(BaseModel):
    """Owner details embedded in task payloads."""

    id: int
    name: str
    email: str
    is_admin: bool

    model_config = ConfigDict(from_attributes=True)


class TaskResponse(BaseModel):
    """Task as returned by the API, with its owner loaded."""

    id: int
    title: str
    description: str
    status: TaskStatus
    deadline: datetime | None = None
    user_id: int
    user: UserSummary
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TaskMutationResponse(TaskResponse):
    """Task returned from create/update, carrying the notification outcome.

    ``email_error`` is only populated when ``email_sent`` is false and a
    notification was actually attempted.
    """

    email_sent: bool = False
    email_sent_at: datetime | None = None
    email_error: str | None = None


class TaskCreate(BaseModel):
    """Payload for creating a task. Any ``status`` sent is ignored."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    user_id: int = Field(..., description="Id of the user the task is assigned to")
    deadline: datetime | None = None

    model_config = ConfigDict(extra="ignore")


class TaskUpdate(BaseModel):
    """Partial update payload.

    Only fields present in the request are applied, so ``deadline: null``
    clears the deadline while an absent ``deadline`` leaves it alone.
    """

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1)
    user_id: int | None = None
    deadline: datetime | None = None
    status: TaskStatus | None = None

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> TaskUpdate:
        for name in ("title", "description", "user_id"):
            if name in self.model_fields_set and getattr(self, name) is None:
                msg = f"{name} may not be null"
                raise ValueError(msg)
        return self

    def changes(self) -> dict[str, object]:
        """Fields an administrator asked to change (status excluded)."""
        return self.model_dump(include=self.model_fields_set - {"status"})
