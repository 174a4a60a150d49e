"""Tests for todobot.core.reminder_service — durations, creation and snooze."""

from datetime import datetime, timedelta, timezone

import pytest

from todobot.core.errors import InvalidFormatError, NotFoundError, ValidationError
from todobot.core.reminder_service import (
    DEFAULT_SNOOZE,
    MAX_DURATION,
    MAX_REPEAT_COUNT,
    parse_duration,
    shift,
    whole_hours,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestParseDuration:
    @pytest.mark.parametrize(
        "token, expected",
        [
            ("2h", timedelta(hours=2)),
            ("30m", timedelta(minutes=30)),
            ("1d", timedelta(days=1)),
            ("1w", timedelta(weeks=1)),
            (" 2H ", timedelta(hours=2)),
        ],
    )
    def test_valid(self, token, expected):
        assert parse_duration(token) == expected

    @pytest.mark.parametrize("token", ["5x", "h", "", "1.5h", "-2h", "2 h", "abc"])
    def test_invalid(self, token):
        with pytest.raises(InvalidFormatError):
            parse_duration(token)

    def test_zero_rejected(self):
        with pytest.raises(InvalidFormatError):
            parse_duration("0m")

    def test_invalid_format_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            parse_duration("5x")

    def test_longest_allowed(self):
        assert parse_duration("520w") == MAX_DURATION
        assert parse_duration("87360h") == MAX_DURATION

    @pytest.mark.parametrize("token", ["521w", "87361h", "999999w", "99999999999w"])
    def test_too_long_rejected(self, token):
        with pytest.raises(InvalidFormatError):
            parse_duration(token)


def test_shift_out_of_range_is_a_validation_error():
    with pytest.raises(ValidationError):
        shift(datetime.max.replace(tzinfo=timezone.utc), timedelta(days=1))


def test_whole_hours_floors():
    assert whole_hours(timedelta(minutes=30)) == 0
    assert whole_hours(timedelta(minutes=90)) == 1
    assert whole_hours(timedelta(days=1)) == 24


class TestCreateReminder:
    def test_one_shot_default(self, reminder_service, task_service, user):
        task = task_service.create(user.id, "A")
        r = reminder_service.create_reminder(task.id, "2h", now=NOW)
        assert r.next_notify_time == NOW + timedelta(hours=2)
        assert r.repeat_count == 1
        assert r.repeat_interval_hours == 2
        assert r.snoozed_until is None
        assert r.is_active

    def test_sub_hour_interval_floors_to_zero(self, reminder_service, task_service, user):
        task = task_service.create(user.id, "A")
        r = reminder_service.create_reminder(task.id, "30m", now=NOW)
        assert r.next_notify_time == NOW + timedelta(minutes=30)
        assert r.repeat_interval_hours == 0

    def test_repeating(self, reminder_service, task_service, user):
        task = task_service.create(user.id, "A")
        r = reminder_service.create_reminder(task.id, "1d", repeat_count=7, now=NOW)
        assert r.repeat_count == 7
        assert r.repeat_interval_hours == 24

    def test_repeating_needs_whole_hour(self, reminder_service, task_service, user):
        task = task_service.create(user.id, "A")
        with pytest.raises(ValidationError):
            reminder_service.create_reminder(task.id, "30m", repeat_count=3, now=NOW)

    @pytest.mark.parametrize("count", [0, MAX_REPEAT_COUNT + 1])
    def test_repeat_count_bounds(self, reminder_service, task_service, user, count):
        task = task_service.create(user.id, "A")
        with pytest.raises(ValidationError):
            reminder_service.create_reminder(task.id, "1h", repeat_count=count, now=NOW)

    def test_unknown_task(self, reminder_service):
        with pytest.raises(NotFoundError):
            reminder_service.create_reminder("missing", "2h", now=NOW)

    def test_bad_duration_creates_nothing(self, reminder_service, task_service, user, todo_db):
        task = task_service.create(user.id, "A")
        with pytest.raises(InvalidFormatError):
            reminder_service.create_reminder(task.id, "5x", now=NOW)
        assert todo_db.get_user_reminders(user.id) == []


class TestCreateForPosition:
    def test_resolves_number(self, reminder_service, task_service, user):
        task_service.create(user.id, "A")
        task_service.create(user.id, "B")
        reminder, title = reminder_service.create_for_position(user.id, 2, "1h", now=NOW)
        assert title == "A"
        assert reminder.next_notify_time == NOW + timedelta(hours=1)

    def test_bad_number(self, reminder_service, task_service, user):
        task_service.create(user.id, "A")
        with pytest.raises(NotFoundError):
            reminder_service.create_for_position(user.id, 5, "1h", now=NOW)

    def test_bad_duration_reported_before_number(self, reminder_service, user):
        with pytest.raises(InvalidFormatError):
            reminder_service.create_for_position(user.id, 5, "5x", now=NOW)


class TestSnooze:
    def test_default_snooze(self, reminder_service, task_service, user):
        task = task_service.create(user.id, "A")
        r = reminder_service.create_reminder(task.id, "1h", now=NOW)
        snoozed = reminder_service.snooze(r.id, now=NOW)
        assert snoozed.snoozed_until == NOW + DEFAULT_SNOOZE
        assert DEFAULT_SNOOZE == timedelta(minutes=30)

    def test_snooze_keeps_next_notify_time(self, reminder_service, task_service, user):
        task = task_service.create(user.id, "A")
        r = reminder_service.create_reminder(task.id, "1h", now=NOW)
        snoozed = reminder_service.snooze(r.id, "2h", now=NOW)
        assert snoozed.next_notify_time == r.next_notify_time
        assert snoozed.snoozed_until == NOW + timedelta(hours=2)

    def test_snooze_unknown(self, reminder_service):
        with pytest.raises(NotFoundError):
            reminder_service.snooze("missing", "1h", now=NOW)

    def test_snooze_bad_duration(self, reminder_service, task_service, user):
        task = task_service.create(user.id, "A")
        r = reminder_service.create_reminder(task.id, "1h", now=NOW)
        with pytest.raises(InvalidFormatError):
            reminder_service.snooze(r.id, "soon", now=NOW)

    def test_snooze_owner_guard(self, reminder_service, task_service, user, todo_db):
        other = todo_db.create_user(99, "Eve")
        task = task_service.create(other.id, "Eve's task")
        r = reminder_service.create_reminder(task.id, "1h", now=NOW)
        with pytest.raises(NotFoundError):
            reminder_service.snooze(r.id, "1h", owner_id=user.id, now=NOW)
        assert todo_db.get_reminder(r.id).snoozed_until is None

    def test_snooze_by_position(self, reminder_service, task_service, user):
        a = task_service.create(user.id, "A")
        b = task_service.create(user.id, "B")
        reminder_service.create_reminder(a.id, "1h", now=NOW)
        reminder_service.create_reminder(b.id, "3h", now=NOW)

        views = reminder_service.list_for_user(user.id)
        assert [v.task_title for v in views] == ["A", "B"]

        view = reminder_service.snooze_by_position(user.id, 2, "1d", now=NOW)
        assert view.task_title == "B"
        assert view.reminder.snoozed_until == NOW + timedelta(days=1)

    def test_snooze_by_bad_position(self, reminder_service, user):
        with pytest.raises(NotFoundError):
            reminder_service.snooze_by_position(user.id, 1, now=NOW)


class TestHugeDurations:
    def test_create_for_position(self, reminder_service, task_service, user, todo_db):
        task_service.create(user.id, "A")
        with pytest.raises(ValidationError):
            reminder_service.create_for_position(user.id, 1, "999999w", now=NOW)
        assert todo_db.get_user_reminders(user.id) == []

    def test_snooze(self, reminder_service, task_service, user, todo_db):
        task = task_service.create(user.id, "A")
        r = reminder_service.create_reminder(task.id, "1h", now=NOW)
        with pytest.raises(ValidationError):
            reminder_service.snooze(r.id, "999999w", now=NOW)
        assert todo_db.get_reminder(r.id).snoozed_until is None
