"""Tests for todobot.core.task_service — TaskService."""

from datetime import datetime, timedelta, timezone

import pytest

from todobot.core.errors import NotFoundError, ValidationError
from todobot.core.task_service import task_number

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def abc(task_service, user):
    """Tasks A, B, C created in that order; listed as C, B, A."""
    return [task_service.create(user.id, title) for title in ("A", "B", "C")]


class TestCreate:
    def test_creates_pending_task(self, task_service, user):
        task = task_service.create(user.id, "  Buy milk  ", description=" 2 liters ")
        assert task.title == "Buy milk"
        assert task.description == "2 liters"
        assert task.status == "pending"
        assert task.priority == "medium"

    def test_blank_title_rejected(self, task_service, user, todo_db):
        with pytest.raises(ValidationError):
            task_service.create(user.id, "   ")
        with pytest.raises(ValidationError):
            task_service.create(user.id, None)
        assert todo_db.get_user_tasks(user.id) == []

    def test_unknown_priority_rejected(self, task_service, user):
        with pytest.raises(ValidationError):
            task_service.create(user.id, "A", priority="urgent")

    def test_priority_is_normalized(self, task_service, user):
        assert task_service.create(user.id, "A", priority="HIGH").priority == "high"

    def test_blank_description_becomes_none(self, task_service, user):
        assert task_service.create(user.id, "A", description="  ").description is None


class TestPositions:
    def test_list_is_newest_first(self, task_service, user, abc):
        assert [t.title for t in task_service.list(user.id)] == ["C", "B", "A"]

    def test_resolve_position(self, task_service, user, abc):
        assert task_service.resolve_position(user.id, 1).title == "C"
        assert task_service.resolve_position(user.id, 3).title == "A"

    @pytest.mark.parametrize("position", [0, -1, 4])
    def test_out_of_range(self, task_service, user, abc, position):
        with pytest.raises(NotFoundError):
            task_service.resolve_position(user.id, position)

    def test_complete_by_position(self, task_service, user, abc):
        done = task_service.complete_by_position(user.id, 2)
        assert done.title == "B"
        assert done.is_completed
        statuses = {t.title: t.status for t in task_service.list(user.id)}
        assert statuses == {"A": "pending", "B": "completed", "C": "pending"}

    def test_delete_by_position_renumbers(self, task_service, user, abc):
        deleted = task_service.delete_by_position(user.id, 1)
        assert deleted.title == "C"
        assert [t.title for t in task_service.list(user.id)] == ["B", "A"]

    def test_invalid_position_mutates_nothing(self, task_service, user, abc):
        with pytest.raises(NotFoundError):
            task_service.delete_by_position(user.id, 4)
        with pytest.raises(NotFoundError):
            task_service.complete_by_position(user.id, 0)
        tasks = task_service.list(user.id)
        assert len(tasks) == 3
        assert all(t.status == "pending" for t in tasks)

    def test_task_number(self, task_service, user, abc):
        a, b, c = abc
        tasks = task_service.list(user.id)
        assert task_number(tasks, c.id) == 1
        assert task_number(tasks, a.id) == 3

    def test_task_number_falls_back_to_one(self, task_service, user, abc):
        assert task_number(task_service.list(user.id), "missing") == 1
        assert task_number([], "missing") == 1


class TestCompleteAndDelete:
    def test_complete_is_idempotent(self, task_service, user):
        task = task_service.create(user.id, "A")
        first = task_service.complete(task.id)
        second = task_service.complete(task.id)
        assert first.is_completed and second.is_completed

    def test_complete_unknown(self, task_service):
        with pytest.raises(NotFoundError):
            task_service.complete("missing")

    def test_delete_cascades_reminders(self, task_service, user, todo_db):
        task = task_service.create(user.id, "A")
        reminder = todo_db.create_reminder(task.id, NOW)
        task_service.delete_by_id(task.id)
        assert todo_db.get_reminder(reminder.id) is None

    def test_delete_unknown(self, task_service):
        with pytest.raises(NotFoundError):
            task_service.delete_by_id("missing")

    def test_owner_guard(self, task_service, user, todo_db):
        other = todo_db.create_user(99, "Eve")
        task = task_service.create(other.id, "Eve's task")

        with pytest.raises(NotFoundError):
            task_service.delete_by_id(task.id, owner_id=user.id)
        with pytest.raises(NotFoundError):
            task_service.complete(task.id, owner_id=user.id)
        assert todo_db.get_task(task.id).status == "pending"

    def test_delete_without_owner_is_unconditional(self, task_service, user, todo_db):
        other = todo_db.create_user(99, "Eve")
        task = task_service.create(other.id, "Eve's task")
        task_service.delete_by_id(task.id)
        assert todo_db.get_task(task.id) is None


class TestStats:
    def test_no_tasks_is_zero_percent(self, task_service, user):
        stats = task_service.stats(user.id, NOW)
        assert stats.total == 0
        assert stats.completion_rate == 0.0

    def test_completion_rate(self, task_service, user, abc):
        task_service.complete(abc[0].id)
        stats = task_service.stats(user.id, NOW)
        assert stats.total == 3
        assert stats.completed == 1
        assert stats.completion_rate == pytest.approx(33.333, rel=1e-3)

    def test_overdue(self, task_service, user):
        task_service.create(user.id, "Late", due_time=NOW - timedelta(hours=1))
        assert task_service.stats(user.id, NOW).overdue == 1
