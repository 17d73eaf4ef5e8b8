"""Track which occurrences of a reminder have been completed."""

from dataclasses import replace
from datetime import datetime

from .models import Reminder, RecurringCompletion, SingleShotCompletion, ensure_aware
from .recurrence import is_within_day


def is_completed_on_date(reminder: Reminder, date: datetime) -> bool:
    """Check whether the occurrence on ``date``'s local day is completed.

    Single-shot reminders ignore ``date`` and report their one flag.
    """
    if isinstance(reminder.completion, RecurringCompletion):
        return any(is_within_day(d, date) for d in reminder.completion.completed_dates)
    return reminder.completion.completed


def toggle_completion(reminder: Reminder, date: datetime) -> Reminder:
    """Flip the completion of the occurrence on ``date``.

    Args:
        reminder: Current full record
        date: The completion instant; for recurring reminders, also selects the day

    Returns:
        The replacement record
    """
    date = ensure_aware(date)
    completion = reminder.completion

    if isinstance(completion, RecurringCompletion):
        if is_completed_on_date(reminder, date):
            completed_dates = tuple(
                d for d in completion.completed_dates if not is_within_day(d, date)
            )
        else:
            completed_dates = completion.completed_dates + (date,)
        return replace(reminder, completion=RecurringCompletion(completed_dates=completed_dates))

    if completion.completed:
        return replace(reminder, completion=SingleShotCompletion(completed=False, completed_at=None))
    return replace(reminder, completion=SingleShotCompletion(completed=True, completed_at=date))
