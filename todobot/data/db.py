"""
Todo Reminder Bot — Persistence Gateway.

Users, tasks and reminders persist in a single SQLite file and survive bot
restarts. Both the interactive handlers and the background reminder checker
go through TodoDB; it is the only shared mutable state in the process.

Every method opens its own connection, commits (or rolls back) and closes
it, so a single statement is the unit of atomicity and the class is safe to
call from worker threads.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from todobot.core.errors import DependencyError
from todobot.data.models import (
    Priority,
    Reminder,
    ReminderView,
    Task,
    TaskStats,
    TaskStatus,
    User,
    utcnow,
)

logger = logging.getLogger(__name__)


def _to_db(value: datetime | None) -> str | None:
    """Serialize to fixed-width UTC ISO text so that string order is time order."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _from_db(raw: str | None) -> datetime | None:
    if not raw:
        return None
    return datetime.fromisoformat(raw)


def _new_id() -> str:
    return str(uuid.uuid4())


class TodoDB:
    """SQLite-backed storage for users, tasks and reminders."""

    def __init__(self, db_path: str | None = None, timeout: float | None = None) -> None:
        if db_path is None or timeout is None:
            from todobot.config import settings
            db_path = db_path or settings.DATABASE_PATH
            timeout = timeout if timeout is not None else settings.DB_TIMEOUT_SECONDS

        self._db_path = db_path
        self._timeout = timeout
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self._db_path, timeout=self._timeout)
        except sqlite3.Error as exc:
            raise DependencyError(f"Cannot open database {self._db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            with conn:
                yield conn
        except sqlite3.Error as exc:
            raise DependencyError(f"Database operation failed: {exc}") from exc
        finally:
            conn.close()

    def close(self) -> None:
        """Shutdown hook. Connections are per-call, so nothing stays open."""
        logger.info("Database %s released", self._db_path)

    def _init_db(self) -> None:
        """Create tables if they don't exist, and migrate schema."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id                        TEXT    PRIMARY KEY,
                    telegram_id               INTEGER NOT NULL UNIQUE,
                    name                      TEXT    NOT NULL,
                    timezone                  TEXT    NOT NULL DEFAULT 'UTC',
                    language                  TEXT    NOT NULL DEFAULT 'en',
                    default_reminder_interval INTEGER NOT NULL DEFAULT 24,
                    created_at                TEXT    NOT NULL,
                    updated_at                TEXT    NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tasks (
                    id          TEXT PRIMARY KEY,
                    user_id     TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    title       TEXT NOT NULL,
                    description TEXT,
                    due_time    TEXT,
                    priority    TEXT NOT NULL DEFAULT 'medium',
                    status      TEXT NOT NULL DEFAULT 'pending',
                    created_at  TEXT NOT NULL,
                    updated_at  TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS reminders (
                    id                    TEXT    PRIMARY KEY,
                    task_id               TEXT    NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
                    repeat_count          INTEGER NOT NULL DEFAULT 1,
                    repeat_interval_hours INTEGER NOT NULL DEFAULT 24,
                    next_notify_time      TEXT    NOT NULL,
                    snoozed_until         TEXT,
                    is_active             INTEGER NOT NULL DEFAULT 1,
                    created_at            TEXT    NOT NULL,
                    updated_at            TEXT    NOT NULL
                )
            """)
            # Migrate existing DBs: add new columns if missing
            user_cols = {
                row[1] for row in conn.execute("PRAGMA table_info(users)").fetchall()
            }
            if "notification_style" not in user_cols:
                conn.execute(
                    "ALTER TABLE users ADD COLUMN notification_style TEXT NOT NULL DEFAULT 'detailed'"
                )
            task_cols = {
                row[1] for row in conn.execute("PRAGMA table_info(tasks)").fetchall()
            }
            if "tags" not in task_cols:
                conn.execute("ALTER TABLE tasks ADD COLUMN tags TEXT")

            conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_user_id ON tasks(user_id)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_reminders_task_id ON reminders(task_id)")
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_reminders_next_notify "
                "ON reminders(next_notify_time) WHERE is_active = 1"
            )
        logger.debug("Todo tables initialized at %s", self._db_path)

    # ------------------------------------------------------------------
    # Row mappers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            telegram_id=row["telegram_id"],
            name=row["name"],
            timezone=row["timezone"],
            language=row["language"],
            default_reminder_interval=row["default_reminder_interval"],
            notification_style=row["notification_style"],
            created_at=_from_db(row["created_at"]),
            updated_at=_from_db(row["updated_at"]),
        )

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            description=row["description"],
            due_time=_from_db(row["due_time"]),
            priority=row["priority"],
            status=row["status"],
            tags=row["tags"],
            created_at=_from_db(row["created_at"]),
            updated_at=_from_db(row["updated_at"]),
        )

    @staticmethod
    def _row_to_reminder(row: sqlite3.Row) -> Reminder:
        return Reminder(
            id=row["id"],
            task_id=row["task_id"],
            repeat_count=row["repeat_count"],
            repeat_interval_hours=row["repeat_interval_hours"],
            next_notify_time=_from_db(row["next_notify_time"]),
            snoozed_until=_from_db(row["snoozed_until"]),
            is_active=bool(row["is_active"]),
            created_at=_from_db(row["created_at"]),
            updated_at=_from_db(row["updated_at"]),
        )

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_user(
        self,
        telegram_id: int,
        name: str,
        timezone_name: str = "UTC",
        language: str = "en",
    ) -> User:
        """Register a new user."""
        user_id = _new_id()
        now = _to_db(utcnow())
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO users
                    (id, telegram_id, name, timezone, language,
                     default_reminder_interval, notification_style,
                     created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, 24, 'detailed', ?, ?)
                """,
                (user_id, telegram_id, name, timezone_name, language, now, now),
            )
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        logger.info("User registered: %d '%s'", telegram_id, name)
        return self._row_to_user(row)

    def get_user(self, user_id: str) -> User | None:
        """Fetch a user by internal ID."""
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def get_user_by_telegram_id(self, telegram_id: int) -> User | None:
        """Fetch a user by Telegram user ID."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE telegram_id = ?", (telegram_id,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def update_user_language(self, user_id: str, language: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE users SET language = ?, updated_at = ? WHERE id = ?",
                (language, _to_db(utcnow()), user_id),
            )
        updated = cursor.rowcount > 0
        if updated:
            logger.info("User %s language set to %s", user_id, language)
        return updated

    def update_user_settings(
        self,
        user_id: str,
        *,
        timezone_name: str | None = None,
        language: str | None = None,
        default_reminder_interval: int | None = None,
        notification_style: str | None = None,
    ) -> User | None:
        """Update only the given settings and return the fresh user row."""
        assignments = ["updated_at = ?"]
        params: list = [_to_db(utcnow())]
        for column, value in (
            ("timezone", timezone_name),
            ("language", language),
            ("default_reminder_interval", default_reminder_interval),
            ("notification_style", notification_style),
        ):
            if value is not None:
                assignments.append(f"{column} = ?")
                params.append(value)
        params.append(user_id)

        with self._connect() as conn:
            conn.execute(
                f"UPDATE users SET {', '.join(assignments)} WHERE id = ?", params,
            )
        return self.get_user(user_id)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def create_task(
        self,
        user_id: str,
        title: str,
        description: str | None = None,
        due_time: datetime | None = None,
        priority: str = Priority.MEDIUM.value,
        tags: str | None = None,
    ) -> Task:
        """Insert a new pending task."""
        task_id = _new_id()
        now = _to_db(utcnow())
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO tasks
                    (id, user_id, title, description, due_time,
                     priority, status, tags, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    task_id, user_id, title, description, _to_db(due_time),
                    priority, TaskStatus.PENDING.value, tags, now, now,
                ),
            )
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        logger.info("Task added: %s '%s' for user %s", task_id, title, user_id)
        return self._row_to_task(row)

    def get_task(self, task_id: str) -> Task | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    def get_user_tasks(self, user_id: str, status: str | None = None) -> list[Task]:
        """Return a user's tasks, newest first (insertion order breaks ties)."""
        query = "SELECT * FROM tasks WHERE user_id = ?"
        params: list = [user_id]
        if status is not None:
            query += " AND status = ?"
            params.append(status)
        query += " ORDER BY created_at DESC, rowid DESC"

        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_task(r) for r in rows]

    def update_task_status(self, task_id: str, status: str) -> Task | None:
        """Set a task's status. Returns the updated task, or None if unknown."""
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE tasks SET status = ?, updated_at = ? WHERE id = ?",
                (status, _to_db(utcnow()), task_id),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        logger.info("Task %s status -> %s", task_id, status)
        return self._row_to_task(row)

    def delete_task(self, task_id: str) -> bool:
        """Permanently delete a task; its reminders go with it."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Task %s deleted", task_id)
        return deleted

    def get_task_stats(self, user_id: str, now: datetime | None = None) -> TaskStats:
        """Count a user's tasks by status, priority and overdue state."""
        now_text = _to_db(now or utcnow())
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT
                    COUNT(*) AS total,
                    COALESCE(SUM(CASE WHEN status = 'completed' THEN 1 ELSE 0 END), 0) AS completed,
                    COALESCE(SUM(CASE WHEN status = 'pending' THEN 1 ELSE 0 END), 0) AS pending,
                    COALESCE(SUM(CASE WHEN status = 'pending' AND due_time IS NOT NULL
                                      AND due_time < ? THEN 1 ELSE 0 END), 0) AS overdue,
                    COALESCE(SUM(CASE WHEN priority = 'high' THEN 1 ELSE 0 END), 0) AS high_priority,
                    COALESCE(SUM(CASE WHEN priority = 'medium' THEN 1 ELSE 0 END), 0) AS medium_priority,
                    COALESCE(SUM(CASE WHEN priority = 'low' THEN 1 ELSE 0 END), 0) AS low_priority
                FROM tasks
                WHERE user_id = ?
                """,
                (now_text, user_id),
            ).fetchone()
        return TaskStats(
            total=row["total"],
            completed=row["completed"],
            pending=row["pending"],
            overdue=row["overdue"],
            high_priority=row["high_priority"],
            medium_priority=row["medium_priority"],
            low_priority=row["low_priority"],
        )

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------

    def create_reminder(
        self,
        task_id: str,
        next_notify_time: datetime,
        repeat_count: int = 1,
        repeat_interval_hours: int = 24,
    ) -> Reminder:
        """Insert a new active reminder for a task."""
        reminder_id = _new_id()
        now = _to_db(utcnow())
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO reminders
                    (id, task_id, repeat_count, repeat_interval_hours,
                     next_notify_time, snoozed_until, is_active,
                     created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, NULL, 1, ?, ?)
                """,
                (
                    reminder_id, task_id, repeat_count, repeat_interval_hours,
                    _to_db(next_notify_time), now, now,
                ),
            )
            row = conn.execute(
                "SELECT * FROM reminders WHERE id = ?", (reminder_id,),
            ).fetchone()
        logger.info(
            "Reminder %s added for task %s at %s (x%d every %dh)",
            reminder_id, task_id, _to_db(next_notify_time), repeat_count, repeat_interval_hours,
        )
        return self._row_to_reminder(row)

    def get_reminder(self, reminder_id: str) -> Reminder | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM reminders WHERE id = ?", (reminder_id,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_reminder(row)

    def get_user_reminders(self, user_id: str) -> list[ReminderView]:
        """Active reminders on a user's tasks, soonest first."""
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT r.*, t.title AS task_title
                FROM reminders r
                JOIN tasks t ON r.task_id = t.id
                WHERE t.user_id = ? AND r.is_active = 1
                ORDER BY r.next_notify_time ASC, r.rowid ASC
                """,
                (user_id,),
            ).fetchall()
        return [
            ReminderView(reminder=self._row_to_reminder(r), task_title=r["task_title"])
            for r in rows
        ]

    def get_due_reminders(self, now: datetime | None = None) -> list[Reminder]:
        """Return active reminders whose time has come and that aren't snoozed.

        Ordered by next_notify_time ascending so the oldest backlog goes first.
        """
        now_text = _to_db(now or utcnow())
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT * FROM reminders
                WHERE is_active = 1
                  AND next_notify_time <= ?
                  AND (snoozed_until IS NULL OR snoozed_until <= ?)
                ORDER BY next_notify_time ASC, rowid ASC
                """,
                (now_text, now_text),
            ).fetchall()
        return [self._row_to_reminder(r) for r in rows]

    def update_reminder_schedule(
        self, reminder_id: str, next_time: datetime, repeat_count: int,
    ) -> bool:
        """Move a repeating reminder to its next firing and clear any snooze."""
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE reminders
                SET next_notify_time = ?, repeat_count = ?, snoozed_until = NULL, updated_at = ?
                WHERE id = ?
                """,
                (_to_db(next_time), repeat_count, _to_db(utcnow()), reminder_id),
            )
        return cursor.rowcount > 0

    def snooze_reminder(self, reminder_id: str, until: datetime) -> Reminder | None:
        """Hold a reminder back until `until`; next_notify_time is left alone."""
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE reminders SET snoozed_until = ?, updated_at = ? WHERE id = ?",
                (_to_db(until), _to_db(utcnow()), reminder_id),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute(
                "SELECT * FROM reminders WHERE id = ?", (reminder_id,),
            ).fetchone()
        logger.info("Reminder %s snoozed until %s", reminder_id, _to_db(until))
        return self._row_to_reminder(row)

    def delete_reminder(self, reminder_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM reminders WHERE id = ?", (reminder_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Reminder %s deleted", reminder_id)
        return deleted
