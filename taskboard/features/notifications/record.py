"""Immutable description of "task T was assigned to user U".

A record is built from ORM objects at dispatch time and serialized into
the queue payload, so a worker renders exactly what was true when the
assignment happened.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from taskboard.features.tasks.models import Task
    from taskboard.features.users.models import User


@dataclass(frozen=True, slots=True)
class RecipientSnapshot:
    id: int
    name: str
    email: str


@dataclass(frozen=True, slots=True)
class TaskSnapshot:
    id: int
    title: str
    description: str
    status: str
    deadline: datetime | None = None


@dataclass(frozen=True, slots=True)
class NotificationRecord:
    recipient: RecipientSnapshot
    task: TaskSnapshot
    previous_owner_id: int | None = None

    @property
    def is_reassignment(self) -> bool:
        return self.previous_owner_id is not None

    @classmethod
    def from_models(
        cls, recipient: User, task: Task, previous_owner_id: int | None = None
    ) -> NotificationRecord:
        return cls(
            recipient=RecipientSnapshot(
                id=recipient.id, name=recipient.name, email=recipient.email or ""
            ),
            task=TaskSnapshot(
                id=task.id,
                title=task.title,
                description=task.description,
                status=str(task.status),
                deadline=task.deadline,
            ),
            previous_owner_id=previous_owner_id,
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "recipient": {
                "id": self.recipient.id,
                "name": self.recipient.name,
                "email": self.recipient.email,
            },
            "task": {
                "id": self.task.id,
                "title": self.task.title,
                "description": self.task.description,
                "status": self.task.status,
                "deadline": self.task.deadline.isoformat() if self.task.deadline else None,
            },
            "previous_owner_id": self.previous_owner_id,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> NotificationRecord:
        """Rebuild a record from ``to_payload`` output.

        Raises:
            KeyError: If a required field is missing.
        """
        task = payload["task"]
        deadline = task.get("deadline")
        return cls(
            recipient=RecipientSnapshot(**payload["recipient"]),
            task=TaskSnapshot(
                id=task["id"],
                title=task["title"],
                description=task["description"],
                status=task["status"],
                deadline=datetime.fromisoformat(deadline) if deadline else None,
            ),
            previous_owner_id=payload.get("previous_owner_id"),
        )
