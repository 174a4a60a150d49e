"""
Todo Reminder Bot — Task Service.

CRUD over tasks plus the translation between user-facing task numbers and
stable task ids. A task number is the 1-based position of a task in the
owner's newest-first list *at the moment of the request*; it is never
stored, so every numbered command resolves it afresh and works on the id
from then on.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from todobot.core.errors import NotFoundError, ValidationError
from todobot.data.models import Priority, Task, TaskStats, TaskStatus, utcnow

if TYPE_CHECKING:
    from todobot.data.db import TodoDB

logger = logging.getLogger(__name__)

_PRIORITIES = {p.value for p in Priority}


def task_number(tasks: list[Task], task_id: str) -> int:
    """Number of a task within a newest-first list, or 1 if it isn't there."""
    for index, task in enumerate(tasks, start=1):
        if task.id == task_id:
            return index
    return 1


class TaskService:
    """Task operations used by the bot front-end."""

    def __init__(self, db: TodoDB) -> None:
        self._db = db

    def create(
        self,
        owner_id: str,
        title: str | None,
        description: str | None = None,
        due_time: datetime | None = None,
        priority: str = Priority.MEDIUM.value,
        tags: str | None = None,
    ) -> Task:
        """Create a pending task. Raises ValidationError on a blank title."""
        title = (title or "").strip()
        if not title:
            raise ValidationError("Task title is required")

        priority = (priority or Priority.MEDIUM.value).strip().lower()
        if priority not in _PRIORITIES:
            raise ValidationError(
                f"Unknown priority {priority!r}; use one of: high, medium, low"
            )

        if description is not None:
            description = description.strip() or None

        return self._db.create_task(
            owner_id,
            title,
            description=description,
            due_time=due_time,
            priority=priority,
            tags=tags,
        )

    def list(self, owner_id: str) -> list[Task]:
        """All of the owner's tasks, newest first. Index + 1 is the task number."""
        return self._db.get_user_tasks(owner_id)

    def resolve_position(self, owner_id: str, position: int) -> Task:
        """Map a task number onto the task it currently points at."""
        tasks = self.list(owner_id)
        if position < 1 or position > len(tasks):
            raise NotFoundError(
                f"Task {position} not found; use a number between 1 and {len(tasks)}"
            )
        return tasks[position - 1]

    def get(self, task_id: str, owner_id: str | None = None) -> Task:
        task = self._db.get_task(task_id)
        if task is None or (owner_id is not None and task.user_id != owner_id):
            raise NotFoundError(f"Task {task_id} not found")
        return task

    def complete(self, task_id: str, owner_id: str | None = None) -> Task:
        """Mark a task completed. There is no way back to pending."""
        task = self.get(task_id, owner_id)
        if task.is_completed:
            return task

        updated = self._db.update_task_status(task.id, TaskStatus.COMPLETED.value)
        if updated is None:
            # Deleted between the lookup and the update.
            raise NotFoundError(f"Task {task_id} not found")
        return updated

    def complete_by_position(self, owner_id: str, position: int) -> Task:
        task = self.resolve_position(owner_id, position)
        return self.complete(task.id, owner_id)

    def delete_by_id(self, task_id: str, owner_id: str | None = None) -> None:
        """Delete a task and, through the cascade, its reminders.

        Without owner_id the delete is unconditional; with it, a task that
        belongs to someone else is reported as not found and left alone.
        """
        if owner_id is not None:
            self.get(task_id, owner_id)
        if not self._db.delete_task(task_id):
            raise NotFoundError(f"Task {task_id} not found")

    def delete_by_position(self, owner_id: str, position: int) -> Task:
        task = self.resolve_position(owner_id, position)
        self.delete_by_id(task.id, owner_id)
        return task

    def stats(self, owner_id: str, now: datetime | None = None) -> TaskStats:
        return self._db.get_task_stats(owner_id, now or utcnow())

