"""
Todo Reminder Bot — Reminder creation and snooze.

Durations are written as a whole number followed by a unit suffix:
'30m' (minutes), '2h' (hours), '1d' (days) or '1w' (weeks).

A reminder created without an explicit repeat count fires once and is then
deleted by the reminder checker. Passing repeat_count > 1 makes it fire
that many times, duration apart.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from todobot.core.errors import InvalidFormatError, NotFoundError, ValidationError
from todobot.data.models import Reminder, ReminderView, utcnow

if TYPE_CHECKING:
    from todobot.core.task_service import TaskService
    from todobot.data.db import TodoDB

logger = logging.getLogger(__name__)

DEFAULT_SNOOZE = timedelta(minutes=30)
MAX_REPEAT_COUNT = 100
MAX_DURATION = timedelta(weeks=520)

_DURATION_RE = re.compile(r"^([0-9]+)([hmdw])$")

_UNITS = {
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
}


def parse_duration(token: str) -> timedelta:
    """Parse a duration token such as '2h' or '30m'.

    Raises:
        InvalidFormatError: unknown suffix, missing or non-numeric magnitude,
            a zero duration, or one longer than MAX_DURATION (520 weeks).
    """
    text = (token or "").strip().lower()
    match = _DURATION_RE.match(text)
    if match is None:
        raise InvalidFormatError(
            f"Invalid time format {token!r}. Use e.g. 30m, 2h, 1d or 1w"
        )
    amount = int(match.group(1))
    if amount == 0:
        raise InvalidFormatError("Duration must be greater than zero")
    unit = _UNITS[match.group(2)]
    if amount > MAX_DURATION // unit:
        raise InvalidFormatError(
            f"Duration {token.strip()!r} is too long; the maximum is 520w"
        )
    return amount * unit


def shift(start: datetime, duration: timedelta) -> datetime:
    """start + duration, reporting an out-of-range result as bad input."""
    try:
        return start + duration
    except OverflowError as exc:
        raise ValidationError("That time is too far in the future") from exc


def whole_hours(duration: timedelta) -> int:
    """Number of complete hours in a duration (floor)."""
    return int(duration.total_seconds() // 3600)


class ReminderService:
    """Creates, lists and snoozes reminders."""

    def __init__(self, db: TodoDB, tasks: TaskService) -> None:
        self._db = db
        self._tasks = tasks

    def create_reminder(
        self,
        task_id: str,
        duration_text: str,
        *,
        repeat_count: int = 1,
        now: datetime | None = None,
    ) -> Reminder:
        """Schedule a reminder `duration_text` from now for a task.

        The repeat interval is derived from the same duration, floored to
        whole hours. A repeating reminder therefore needs at least '1h'.
        """
        duration = parse_duration(duration_text)
        interval_hours = whole_hours(duration)

        if repeat_count < 1 or repeat_count > MAX_REPEAT_COUNT:
            raise ValidationError(
                f"Repeat count must be between 1 and {MAX_REPEAT_COUNT}"
            )
        if repeat_count > 1 and interval_hours < 1:
            raise ValidationError("Repeating reminders need an interval of at least 1h")

        if self._db.get_task(task_id) is None:
            raise NotFoundError(f"Task {task_id} not found")

        next_time = shift(now or utcnow(), duration)
        return self._db.create_reminder(
            task_id,
            next_time,
            repeat_count=repeat_count,
            repeat_interval_hours=interval_hours,
        )

    def create_for_position(
        self,
        owner_id: str,
        position: int,
        duration_text: str,
        *,
        repeat_count: int = 1,
        now: datetime | None = None,
    ) -> tuple[Reminder, str]:
        """Resolve a task number and schedule a reminder for it.

        Returns the reminder and the task title, for the confirmation message.
        """
        # Parse first so a bad token is reported even for an unknown task.
        parse_duration(duration_text)
        task = self._tasks.resolve_position(owner_id, position)
        reminder = self.create_reminder(
            task.id, duration_text, repeat_count=repeat_count, now=now,
        )
        return reminder, task.title

    def list_for_user(self, owner_id: str) -> list[ReminderView]:
        """Active reminders on the owner's tasks, soonest first.

        Index + 1 is the reminder number accepted by snooze_by_position.
        """
        return self._db.get_user_reminders(owner_id)

    def snooze(
        self,
        reminder_id: str,
        duration_text: str | None = None,
        *,
        owner_id: str | None = None,
        now: datetime | None = None,
    ) -> Reminder:
        """Hold a reminder back for a while without moving its schedule.

        Without a duration the default snooze of 30 minutes applies.
        """
        duration = DEFAULT_SNOOZE if duration_text is None else parse_duration(duration_text)

        if owner_id is not None:
            self._check_owner(reminder_id, owner_id)

        snoozed = self._db.snooze_reminder(reminder_id, shift(now or utcnow(), duration))
        if snoozed is None:
            raise NotFoundError(f"Reminder {reminder_id} not found")
        return snoozed

    def snooze_by_position(
        self,
        owner_id: str,
        position: int,
        duration_text: str | None = None,
        *,
        now: datetime | None = None,
    ) -> ReminderView:
        if duration_text is not None:
            parse_duration(duration_text)
        views = self.list_for_user(owner_id)
        if position < 1 or position > len(views):
            raise NotFoundError(
                f"Reminder {position} not found; use a number between 1 and {len(views)}"
            )
        view = views[position - 1]
        view.reminder = self.snooze(
            view.reminder.id, duration_text, owner_id=owner_id, now=now,
        )
        return view

    def _check_owner(self, reminder_id: str, owner_id: str) -> None:
        reminder = self._db.get_reminder(reminder_id)
        if reminder is None:
            raise NotFoundError(f"Reminder {reminder_id} not found")
        task = self._db.get_task(reminder.task_id)
        if task is None or task.user_id != owner_id:
            raise NotFoundError(f"Reminder {reminder_id} not found")
