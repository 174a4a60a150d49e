"""Tests for todobot.data.models — dataclasses and their predicates."""

from datetime import datetime, timedelta, timezone

from todobot.data.models import Reminder, Task, TaskStats, User, utcnow

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_utcnow_is_aware_utc():
    now = utcnow()
    assert now.tzinfo is not None
    assert now.utcoffset() == timedelta(0)


def test_user_defaults():
    user = User(id="u1", telegram_id=1, name="Alice")
    assert user.timezone == "UTC"
    assert user.language == "en"
    assert user.default_reminder_interval == 24
    assert user.notification_style == "detailed"


class TestTask:
    def test_defaults(self):
        task = Task(id="t1", user_id="u1", title="Buy milk")
        assert task.priority == "medium"
        assert task.status == "pending"
        assert task.is_completed is False

    def test_overdue_only_when_pending_and_past_due(self):
        task = Task(id="t1", user_id="u1", title="x", due_time=NOW - timedelta(hours=1))
        assert task.is_overdue(NOW) is True

        task.status = "completed"
        assert task.is_overdue(NOW) is False

    def test_no_due_time_is_never_overdue(self):
        task = Task(id="t1", user_id="u1", title="x")
        assert task.is_overdue(NOW) is False


class TestReminderIsDue:
    def _reminder(self, **kwargs):
        defaults = {"id": "r1", "task_id": "t1", "next_notify_time": NOW - timedelta(seconds=10)}
        defaults.update(kwargs)
        return Reminder(**defaults)

    def test_past_time_is_due(self):
        assert self._reminder().is_due(NOW) is True

    def test_exact_time_is_due(self):
        assert self._reminder(next_notify_time=NOW).is_due(NOW) is True

    def test_future_time_is_not_due(self):
        assert self._reminder(next_notify_time=NOW + timedelta(seconds=60)).is_due(NOW) is False

    def test_inactive_is_not_due(self):
        assert self._reminder(is_active=False).is_due(NOW) is False

    def test_snoozed_into_future_is_not_due(self):
        r = self._reminder(snoozed_until=NOW + timedelta(minutes=30))
        assert r.is_due(NOW) is False

    def test_expired_snooze_is_due(self):
        r = self._reminder(snoozed_until=NOW - timedelta(minutes=1))
        assert r.is_due(NOW) is True


class TestTaskStats:
    def test_completion_rate_zero_without_tasks(self):
        assert TaskStats().completion_rate == 0.0

    def test_completion_rate(self):
        stats = TaskStats(total=4, completed=1, pending=3)
        assert stats.completion_rate == 25.0

    def test_by_priority(self):
        stats = TaskStats(high_priority=2, medium_priority=1, low_priority=0)
        assert stats.by_priority == {"high": 2, "medium": 1, "low": 0}
