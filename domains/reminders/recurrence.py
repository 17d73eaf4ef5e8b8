"""Decide whether a reminder is due on a given calendar day.

Day boundaries are computed in the configured local timezone (``config.LOCAL_TZ``).
"""

from datetime import datetime, time, timedelta

import config
from .models import Reminder, RecurrenceType, ensure_aware

ONE_DAY = timedelta(days=1)


def to_local(value: datetime) -> datetime:
    """Convert a timestamp to the local timezone (naive values are taken as local)."""
    return ensure_aware(value).astimezone(config.LOCAL_TZ)


def start_of_day(value: datetime) -> datetime:
    """Local midnight of the day containing ``value``."""
    return datetime.combine(to_local(value).date(), time.min, tzinfo=config.LOCAL_TZ)


def day_bounds(value: datetime) -> tuple[datetime, datetime]:
    """Return (start, end) of the local calendar day containing ``value``.

    ``end`` is 23:59:59.999999 local time, inclusive.
    """
    local_date = to_local(value).date()
    start = datetime.combine(local_date, time.min, tzinfo=config.LOCAL_TZ)
    end = datetime.combine(local_date, time.max, tzinfo=config.LOCAL_TZ)
    return start, end


def is_within_day(timestamp: datetime, day: datetime) -> bool:
    """True if ``timestamp`` falls inside the local calendar day of ``day``."""
    start, end = day_bounds(day)
    return start <= to_local(timestamp) <= end


def days_between(anchor: datetime, value: datetime) -> int:
    """Whole calendar days from ``anchor``'s day to ``value``'s day.

    Rounded to the nearest day so a DST shift of an hour never moves the result.
    """
    return round((start_of_day(value) - start_of_day(anchor)) / ONE_DAY)


def is_due_on_date(reminder: Reminder, date: datetime) -> bool:
    """Check whether ``reminder`` has an occurrence on ``date``'s local day.

    Args:
        reminder: The reminder to check
        date: Any instant within the day in question

    Returns:
        True if the reminder is due that day
    """
    if not reminder.recurrence:
        return start_of_day(date) == start_of_day(reminder.due_date)

    days_diff = days_between(reminder.due_date, date)
    if days_diff < 0:
        return False

    recurrence_type = reminder.recurrence.type
    if recurrence_type == RecurrenceType.DAILY:
        return True
    if recurrence_type == RecurrenceType.WEEKLY:
        return days_diff % 7 == 0
    if recurrence_type == RecurrenceType.MONTHLY:
        # Anchor days past the end of a shorter month never match that month
        return to_local(date).day == to_local(reminder.due_date).day
    if recurrence_type == RecurrenceType.CUSTOM:
        return days_diff % reminder.recurrence.interval_days == 0

    return False
