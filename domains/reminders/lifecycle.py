"""Keep scheduled notifications in step with stored reminders.

Every change is a full cancel followed by a full replan for the reminder's
tag. There is no incremental update path.
"""

from datetime import datetime
from typing import Iterable

from logger import logger
from .models import Reminder
from .planner import plan_triggers
from .scheduler import NotificationScheduler


def on_reminder_created_or_updated(
    scheduler: NotificationScheduler,
    reminder: Reminder,
    now: datetime = None
) -> int:
    """Replace all triggers for ``reminder`` with a freshly planned set.

    Call after every persisted create, update or completion toggle.

    Returns:
        Count of triggers registered
    """
    cancelled = scheduler.cancel_tag(reminder.id)
    specs = plan_triggers(reminder, now=now)
    for spec in specs:
        scheduler.schedule(spec)

    logger.info(f"Replanned {reminder.id}: cancelled {cancelled}, scheduled {len(specs)}")
    return len(specs)


def on_reminder_deleted(scheduler: NotificationScheduler, reminder_id: str) -> int:
    """Cancel all triggers for a deleted reminder. Returns the count cancelled."""
    cancelled = scheduler.cancel_tag(reminder_id)
    logger.info(f"Cancelled {cancelled} notifications for deleted reminder {reminder_id}")
    return cancelled


def reinitialize_all(
    scheduler: NotificationScheduler,
    reminders: Iterable[Reminder],
    now: datetime = None
) -> int:
    """Rebuild all notification jobs from the stored reminders.

    Cancels every notification job, then replans each reminder.

    Returns:
        Total count of triggers registered
    """
    cleared = scheduler.cancel_all()
    total = 0
    count = 0
    for reminder in reminders:
        total += on_reminder_created_or_updated(scheduler, reminder, now=now)
        count += 1

    logger.info(f"Rebuilt notifications for {count} reminders ({total} triggers, cleared {cleared})")
    return total
