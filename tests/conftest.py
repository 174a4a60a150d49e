"""Shared test fixtures and configuration.

Sets up fake environment variables so todobot.config doesn't sys.exit(),
and provides common fixtures like a temp DB and wired services.
"""

import os

# Patch env vars BEFORE any todobot imports
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "fake-token-for-tests")
os.environ.setdefault("ALLOWED_USER_IDS", "12345")
os.environ.setdefault("DATABASE_PATH", ":memory:")

import pytest


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_todos.db")


@pytest.fixture
def todo_db(tmp_db_path):
    """Return a TodoDB instance backed by a temp file."""
    from todobot.data.db import TodoDB
    return TodoDB(db_path=tmp_db_path, timeout=5)


@pytest.fixture
def user(todo_db):
    """A registered user with Telegram id 12345."""
    return todo_db.create_user(12345, "Alice")


@pytest.fixture
def task_service(todo_db):
    from todobot.core.task_service import TaskService
    return TaskService(todo_db)


@pytest.fixture
def reminder_service(todo_db, task_service):
    from todobot.core.reminder_service import ReminderService
    return ReminderService(todo_db, task_service)


@pytest.fixture
def user_service(todo_db):
    from todobot.core.user_service import UserService
    return UserService(todo_db)
