"""Reminders with recurrence and overdue notifications.

Uses APScheduler triggers with local SQLite persistence.
"""

from .models import (
    Reminder,
    Recurrence,
    RecurrenceType,
    SingleShotCompletion,
    RecurringCompletion,
    new_reminder,
)
from .recurrence import is_due_on_date, day_bounds
from .completion import is_completed_on_date, toggle_completion
from .planner import plan_triggers, TriggerSpec
from .scheduler import NotificationScheduler, SchedulerError
from .store import ReminderStore, StorageError
from .lifecycle import on_reminder_created_or_updated, on_reminder_deleted, reinitialize_all
from .executor import execute_notification, check_notification_permission
from .handler import (
    create_reminder,
    update_reminder,
    edit_reminder,
    toggle_reminder_completion,
    delete_reminder,
    reminders_for_date,
    reload_reminders_on_startup,
    refresh_custom_plans,
    UNCHANGED,
)

__all__ = [
    "Reminder",
    "Recurrence",
    "RecurrenceType",
    "SingleShotCompletion",
    "RecurringCompletion",
    "new_reminder",
    "is_due_on_date",
    "day_bounds",
    "is_completed_on_date",
    "toggle_completion",
    "plan_triggers",
    "TriggerSpec",
    "NotificationScheduler",
    "SchedulerError",
    "ReminderStore",
    "StorageError",
    "on_reminder_created_or_updated",
    "on_reminder_deleted",
    "reinitialize_all",
    "execute_notification",
    "check_notification_permission",
    "create_reminder",
    "update_reminder",
    "edit_reminder",
    "toggle_reminder_completion",
    "delete_reminder",
    "reminders_for_date",
    "reload_reminders_on_startup",
    "refresh_custom_plans",
    "UNCHANGED",
]
