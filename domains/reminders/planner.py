"""Plan the notification triggers for a reminder.

Single-shot reminders get one trigger at the due instant followed by overdue
nudges every ``OVERDUE_REPEAT_INTERVAL_MINUTES`` until ``OVERDUE_WINDOW_HOURS``
after it. Recurring reminders get one calendar trigger plus one repeating
overdue trigger. Custom (every N days) recurrences have no calendar
equivalent, so each occurrence inside ``CUSTOM_RECURRENCE_HORIZON_DAYS`` gets
its own absolute trigger.
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Optional

import config
from .models import Reminder, RecurrenceType
from .recurrence import days_between, to_local


@dataclass(frozen=True)
class NotificationContent:
    """What the notification says."""
    title: str
    body: str


@dataclass(frozen=True)
class TriggerSpec:
    """Base for all triggers. ``tag`` is the owning reminder's ID."""
    content: NotificationContent
    tag: str


@dataclass(frozen=True)
class AtTrigger(TriggerSpec):
    """Fire once at an absolute time."""
    at: datetime


@dataclass(frozen=True)
class RepeatEveryTrigger(TriggerSpec):
    """Fire repeatedly at a fixed interval."""
    every: timedelta


@dataclass(frozen=True)
class DailyTrigger(TriggerSpec):
    """Fire every day at a local time of day, not before ``start``."""
    at_time: time
    start: Optional[datetime] = None


@dataclass(frozen=True)
class WeeklyTrigger(TriggerSpec):
    """Fire every week on a weekday (0 = Monday) at a local time of day."""
    weekday: int
    at_time: time
    start: Optional[datetime] = None


@dataclass(frozen=True)
class MonthlyTrigger(TriggerSpec):
    """Fire every month on a day-of-month at a local time of day."""
    day_of_month: int
    at_time: time
    start: Optional[datetime] = None


def base_content(reminder: Reminder) -> NotificationContent:
    return NotificationContent(title=f"Reminder: {reminder.title}", body="This task is due!")


def overdue_content(reminder: Reminder) -> NotificationContent:
    if reminder.is_recurring:
        body = "This recurring task is due! Please complete it."
    else:
        body = "This task is overdue! Please complete it."
    return NotificationContent(title=f"Overdue: {reminder.title}", body=body)


def overdue_interval() -> timedelta:
    return timedelta(minutes=max(config.OVERDUE_REPEAT_INTERVAL_MINUTES, 1))


def plan_triggers(reminder: Reminder, now: datetime = None) -> list[TriggerSpec]:
    """Compute the full trigger set for the current state of ``reminder``.

    Args:
        reminder: The reminder to plan for
        now: Current time (defaults to now in the local timezone)

    Returns:
        Trigger specs tagged with the reminder's ID (empty if nothing to notify)
    """
    now = now or datetime.now(config.LOCAL_TZ)
    if reminder.is_recurring:
        return _plan_recurring(reminder, now)
    return _plan_single_shot(reminder, now)


def _plan_single_shot(reminder: Reminder, now: datetime) -> list[TriggerSpec]:
    if reminder.completed or reminder.due_date <= now:
        return []

    interval = overdue_interval()
    window_end = reminder.due_date + timedelta(hours=config.OVERDUE_WINDOW_HOURS)
    overdue = overdue_content(reminder)

    triggers: list[TriggerSpec] = [
        AtTrigger(content=base_content(reminder), tag=reminder.id, at=reminder.due_date)
    ]
    fire_at = reminder.due_date + interval
    while fire_at <= window_end:
        triggers.append(AtTrigger(content=overdue, tag=reminder.id, at=fire_at))
        fire_at += interval
    return triggers


def _plan_recurring(reminder: Reminder, now: datetime) -> list[TriggerSpec]:
    anchor = to_local(reminder.due_date)
    at_time = time(anchor.hour, anchor.minute, anchor.second)
    content = base_content(reminder)
    recurrence_type = reminder.recurrence.type

    if recurrence_type == RecurrenceType.DAILY:
        triggers = [DailyTrigger(content=content, tag=reminder.id, at_time=at_time, start=anchor)]
    elif recurrence_type == RecurrenceType.WEEKLY:
        triggers = [WeeklyTrigger(
            content=content, tag=reminder.id, weekday=anchor.weekday(), at_time=at_time, start=anchor
        )]
    elif recurrence_type == RecurrenceType.MONTHLY:
        triggers = [MonthlyTrigger(
            content=content, tag=reminder.id, day_of_month=anchor.day, at_time=at_time, start=anchor
        )]
    elif recurrence_type == RecurrenceType.CUSTOM:
        triggers = _plan_custom_occurrences(reminder, anchor, now)
    else:
        return []

    triggers.append(RepeatEveryTrigger(
        content=overdue_content(reminder), tag=reminder.id, every=overdue_interval()
    ))
    return triggers


def _plan_custom_occurrences(reminder: Reminder, anchor: datetime, now: datetime) -> list[TriggerSpec]:
    """One absolute trigger per future occurrence inside the planning horizon."""
    step = reminder.recurrence.interval_days
    horizon_end = now + timedelta(days=config.CUSTOM_RECURRENCE_HORIZON_DAYS)
    content = base_content(reminder)

    # Skip whole periods already behind us
    k = max(days_between(anchor, now) // step, 0)
    triggers: list[TriggerSpec] = []
    while True:
        # Local wall-clock arithmetic keeps the time of day across DST changes
        occurrence = anchor + timedelta(days=k * step)
        if occurrence > horizon_end:
            break
        if occurrence > now:
            triggers.append(AtTrigger(content=content, tag=reminder.id, at=occurrence))
        k += 1
    return triggers
