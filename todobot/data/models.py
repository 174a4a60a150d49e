"""
Todo Reminder Bot — Data Models.

Three record kinds live in SQLite: users, tasks and reminders.
A reminder belongs to exactly one task, a task to exactly one user.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> datetime:
    """Current time as an aware UTC datetime; all stored times use this zone."""
    return datetime.now(timezone.utc)


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TaskStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class NotificationStyle(str, Enum):
    DETAILED = "detailed"
    COMPACT = "compact"


@dataclass
class User:
    """A bot user, created on first interaction and never hard-deleted."""

    id: str
    telegram_id: int
    name: str
    timezone: str = "UTC"
    language: str = "en"
    default_reminder_interval: int = 24   # hours
    notification_style: str = NotificationStyle.DETAILED.value
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Task:
    """A todo item owned by a single user."""

    id: str
    user_id: str
    title: str
    description: str | None = None
    due_time: datetime | None = None
    priority: str = Priority.MEDIUM.value
    status: str = TaskStatus.PENDING.value
    tags: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED.value

    def is_overdue(self, now: datetime) -> bool:
        return (
            not self.is_completed
            and self.due_time is not None
            and self.due_time < now
        )


@dataclass
class Reminder:
    """A scheduled notification for a task.

    repeat_count is the number of firings left: 1 means the reminder is
    deleted after it fires, N > 1 means it is pushed forward by
    repeat_interval_hours and the count drops to N - 1.
    """

    id: str
    task_id: str
    next_notify_time: datetime
    repeat_count: int = 1
    repeat_interval_hours: int = 24
    snoozed_until: datetime | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_due(self, now: datetime) -> bool:
        """Same predicate the database applies in TodoDB.get_due_reminders."""
        if not self.is_active or self.next_notify_time > now:
            return False
        return self.snoozed_until is None or self.snoozed_until <= now


@dataclass
class TaskStats:
    """Per-user task counters."""

    total: int = 0
    completed: int = 0
    pending: int = 0
    overdue: int = 0
    high_priority: int = 0
    medium_priority: int = 0
    low_priority: int = 0

    @property
    def completion_rate(self) -> float:
        """Percentage of completed tasks; 0.0 for a user with no tasks."""
        if self.total == 0:
            return 0.0
        return self.completed / self.total * 100

    @property
    def by_priority(self) -> dict[str, int]:
        return {
            Priority.HIGH.value: self.high_priority,
            Priority.MEDIUM.value: self.medium_priority,
            Priority.LOW.value: self.low_priority,
        }


@dataclass
class ReminderView:
    """An active reminder joined with the title of its task, for listings."""

    reminder: Reminder
    task_title: str
