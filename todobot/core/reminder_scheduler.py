"""
Todo Reminder Bot — Reminder Checker.

A periodic job sweeps the reminders that are due, sends each one to its
task's owner and then either moves the reminder to its next firing or
deletes it.

Delivery is at-least-once: a reminder is only rescheduled or deleted
after the send succeeded, so a failed send is retried on the next sweep.
Each reminder is handled in isolation; one bad record never stops the
rest of the sweep.

The gateway is synchronous SQLite, so every call runs in a worker thread
with a deadline to keep the event loop responsive.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from todobot.core.errors import DependencyError, NotFoundError
from todobot.core.task_service import task_number
from todobot.data.models import utcnow

if TYPE_CHECKING:
    from todobot.core.dispatcher import NotificationDispatcher
    from todobot.data.db import TodoDB
    from todobot.data.models import Reminder

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class TickReport:
    """Outcome counters of one sweep."""

    due: int = 0
    dispatched: int = 0
    rescheduled: int = 0
    retired: int = 0
    skipped: int = 0     # orphaned reminders (task or user gone)
    failed: int = 0      # send failures and per-item errors


class ReminderScheduler:
    def __init__(
        self,
        db: TodoDB,
        dispatcher: NotificationDispatcher,
        *,
        interval_seconds: float = 30.0,
        io_timeout_seconds: float = 10.0,
    ) -> None:
        self._db = db
        self._dispatcher = dispatcher
        self.interval_seconds = interval_seconds
        self._io_timeout = io_timeout_seconds
        self._lock = asyncio.Lock()
        self._stopping = False

    @property
    def stopping(self) -> bool:
        return self._stopping

    async def _call(self, func: Callable[..., T], *args: Any) -> T:
        """Run a gateway call off the event loop, bounded by the I/O timeout."""
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(func, *args), timeout=self._io_timeout,
            )
        except asyncio.TimeoutError as exc:
            name = getattr(func, "__name__", repr(func))
            raise DependencyError(
                f"{name} timed out after {self._io_timeout:.1f}s"
            ) from exc

    async def tick(self, now: datetime | None = None) -> TickReport:
        """Process every reminder due at `now` (default: current UTC time)."""
        report = TickReport()
        if self._stopping:
            return report

        async with self._lock:
            if self._stopping:
                return report
            now = now or utcnow()

            try:
                due = await self._call(self._db.get_due_reminders, now)
            except Exception:
                logger.exception("Reminder check: fetching due reminders failed")
                return report

            report.due = len(due)
            for reminder in due:
                try:
                    await self._process(reminder, report)
                except NotFoundError as exc:
                    report.skipped += 1
                    logger.warning("Reminder check: skipping reminder %s: %s", reminder.id, exc)
                except Exception:
                    report.failed += 1
                    logger.exception("Reminder check: reminder %s failed", reminder.id)

        if report.due:
            logger.info(
                "Reminder check: %d due, %d sent, %d rescheduled, %d retired, "
                "%d skipped, %d failed",
                report.due, report.dispatched, report.rescheduled,
                report.retired, report.skipped, report.failed,
            )
        return report

    async def _process(self, reminder: Reminder, report: TickReport) -> None:
        task = await self._call(self._db.get_task, reminder.task_id)
        if task is None:
            report.skipped += 1
            logger.warning(
                "Reminder %s points at missing task %s; skipping",
                reminder.id, reminder.task_id,
            )
            return

        user = await self._call(self._db.get_user, task.user_id)
        if user is None:
            report.skipped += 1
            logger.warning(
                "Task %s of reminder %s has no owner %s; skipping",
                task.id, reminder.id, task.user_id,
            )
            return

        tasks = await self._call(self._db.get_user_tasks, user.id)
        number = task_number(tasks, task.id)

        if not await self._dispatcher.dispatch(reminder, task, user, number):
            # Left as is: still due, so the next sweep retries it.
            report.failed += 1
            return
        report.dispatched += 1

        if reminder.repeat_count > 1:
            next_time = reminder.next_notify_time + timedelta(
                hours=reminder.repeat_interval_hours,
            )
            await self._call(
                self._db.update_reminder_schedule,
                reminder.id, next_time, reminder.repeat_count - 1,
            )
            report.rescheduled += 1
        else:
            await self._call(self._db.delete_reminder, reminder.id)
            report.retired += 1

    async def shutdown(self) -> None:
        """Refuse new sweeps and wait for the one in progress to finish."""
        self._stopping = True
        async with self._lock:
            pass
        logger.info("Reminder checker stopped")
