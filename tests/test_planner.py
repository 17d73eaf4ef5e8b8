"""Tests for notification planning."""

from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

import pytest

import config
from domains.reminders.models import (
    Recurrence,
    RecurrenceType,
    Reminder,
    SingleShotCompletion,
)
from domains.reminders.planner import (
    AtTrigger,
    DailyTrigger,
    MonthlyTrigger,
    RepeatEveryTrigger,
    WeeklyTrigger,
    plan_triggers,
)

LONDON = ZoneInfo("Europe/London")
NOW = datetime(2024, 1, 1, 8, 0, tzinfo=LONDON)
DUE = datetime(2024, 1, 1, 9, 30, tzinfo=LONDON)


def make_reminder(due_date=DUE, recurrence=None, completion=None):
    return Reminder(
        id="remind_plan",
        title="Pay rent",
        due_date=due_date,
        created_at=NOW,
        recurrence=recurrence,
        completion=completion,
    )


class TestSingleShotPlan:
    """Future single-shot reminders get a due trigger and a day of overdue nudges."""

    def test_completed_plans_nothing(self):
        reminder = make_reminder(completion=SingleShotCompletion(completed=True, completed_at=NOW))
        assert plan_triggers(reminder, now=NOW) == []

    def test_past_due_plans_nothing(self):
        assert plan_triggers(make_reminder(), now=DUE + timedelta(seconds=1)) == []
        assert plan_triggers(make_reminder(), now=DUE) == []

    def test_due_trigger_first(self):
        triggers = plan_triggers(make_reminder(), now=NOW)
        first = triggers[0]
        assert isinstance(first, AtTrigger)
        assert first.at == DUE
        assert first.content.title == "Reminder: Pay rent"
        assert first.content.body == "This task is due!"

    def test_overdue_triggers_every_minute_for_a_day(self):
        triggers = plan_triggers(make_reminder(), now=NOW)
        overdue = triggers[1:]

        assert len(overdue) == 24 * 60
        assert overdue[0].at == DUE + timedelta(minutes=1)
        assert overdue[-1].at == DUE + timedelta(hours=24)
        assert all(t.content.title == "Overdue: Pay rent" for t in overdue)
        assert all(t.content.body == "This task is overdue! Please complete it." for t in overdue)

    @pytest.mark.parametrize("minutes,expected", [(5, 288), (7, 205), (60, 24)])
    def test_overdue_count_follows_interval(self, monkeypatch, minutes, expected):
        monkeypatch.setattr(config, "OVERDUE_REPEAT_INTERVAL_MINUTES", minutes)
        triggers = plan_triggers(make_reminder(), now=NOW)
        assert len(triggers) - 1 == expected
        assert triggers[1].at == DUE + timedelta(minutes=minutes)

    def test_all_triggers_tagged(self):
        assert {t.tag for t in plan_triggers(make_reminder(), now=NOW)} == {"remind_plan"}


class TestRecurringPlan:
    """Recurring reminders get one calendar trigger and one repeating overdue trigger."""

    def test_daily(self):
        triggers = plan_triggers(make_reminder(recurrence=Recurrence(RecurrenceType.DAILY)), now=NOW)
        assert len(triggers) == 2
        assert triggers[0] == DailyTrigger(
            content=triggers[0].content, tag="remind_plan", at_time=time(9, 30), start=DUE
        )
        assert isinstance(triggers[1], RepeatEveryTrigger)
        assert triggers[1].every == timedelta(minutes=1)
        assert triggers[1].content.body == "This recurring task is due! Please complete it."

    def test_weekly_uses_anchor_weekday(self):
        # 2024-01-03 is a Wednesday
        reminder = make_reminder(
            due_date=datetime(2024, 1, 3, 18, 15, tzinfo=LONDON),
            recurrence=Recurrence(RecurrenceType.WEEKLY),
        )
        calendar = plan_triggers(reminder, now=NOW)[0]
        assert isinstance(calendar, WeeklyTrigger)
        assert calendar.weekday == 2
        assert calendar.at_time == time(18, 15)

    def test_monthly_uses_anchor_day(self):
        reminder = make_reminder(
            due_date=datetime(2024, 1, 31, 7, 0, tzinfo=LONDON),
            recurrence=Recurrence(RecurrenceType.MONTHLY),
        )
        calendar = plan_triggers(reminder, now=NOW)[0]
        assert isinstance(calendar, MonthlyTrigger)
        assert calendar.day_of_month == 31
        assert calendar.at_time == time(7, 0)

    def test_time_of_day_is_local(self):
        """A UTC anchor is converted to local wall-clock time."""
        from datetime import timezone
        reminder = make_reminder(
            due_date=datetime(2024, 6, 1, 8, 0, tzinfo=timezone.utc),
            recurrence=Recurrence(RecurrenceType.DAILY),
        )
        assert plan_triggers(reminder, now=NOW)[0].at_time == time(9, 0)

    def test_calendar_trigger_starts_at_anchor(self):
        anchor = datetime(2024, 3, 1, 9, 0, tzinfo=LONDON)
        reminder = make_reminder(due_date=anchor, recurrence=Recurrence(RecurrenceType.MONTHLY))
        assert plan_triggers(reminder, now=NOW)[0].start == anchor

    def test_past_anchor_still_planned(self):
        reminder = make_reminder(
            due_date=datetime(2023, 6, 1, 9, 0, tzinfo=LONDON),
            recurrence=Recurrence(RecurrenceType.WEEKLY),
        )
        assert len(plan_triggers(reminder, now=NOW)) == 2

    def test_completed_occurrence_does_not_change_plan(self):
        from domains.reminders.completion import toggle_completion
        reminder = make_reminder(recurrence=Recurrence(RecurrenceType.DAILY))
        toggled = toggle_completion(reminder, DUE)
        assert plan_triggers(toggled, now=NOW) == plan_triggers(reminder, now=NOW)


class TestCustomPlan:
    """Custom recurrences are planned occurrence by occurrence."""

    def test_occurrences_within_horizon(self):
        reminder = make_reminder(recurrence=Recurrence(RecurrenceType.CUSTOM, custom_days=10))
        triggers = plan_triggers(reminder, now=NOW)
        occurrences = [t.at for t in triggers if isinstance(t, AtTrigger)]

        assert occurrences == [DUE + timedelta(days=10 * k) for k in range(6)]
        assert isinstance(triggers[-1], RepeatEveryTrigger)

    def test_past_anchor_skips_elapsed_occurrences(self):
        reminder = make_reminder(
            due_date=datetime(2023, 12, 1, 9, 30, tzinfo=LONDON),
            recurrence=Recurrence(RecurrenceType.CUSTOM, custom_days=3),
        )
        occurrences = [t.at for t in plan_triggers(reminder, now=NOW) if isinstance(t, AtTrigger)]
        # 2023-12-01 + 33 days = 2024-01-03
        assert occurrences[0] == datetime(2024, 1, 3, 9, 30, tzinfo=LONDON)
        assert all(o > NOW for o in occurrences)
        assert occurrences[-1] <= NOW + timedelta(days=60)

    def test_keeps_local_time_across_dst(self):
        reminder = make_reminder(
            due_date=datetime(2024, 3, 20, 9, 0, tzinfo=LONDON),
            recurrence=Recurrence(RecurrenceType.CUSTOM, custom_days=14),
        )
        now = datetime(2024, 3, 1, tzinfo=LONDON)
        occurrences = [t.at for t in plan_triggers(reminder, now=now) if isinstance(t, AtTrigger)]
        assert occurrences[1] == datetime(2024, 4, 3, 9, 0, tzinfo=LONDON)
        assert occurrences[1].utcoffset() == timedelta(hours=1)
