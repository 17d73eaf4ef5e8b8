"""Reminder mutations and queries.

Every mutation follows the same order:
load all -> compute new record -> save all -> cancel old triggers -> plan new triggers.

Mutations read with ``load_for_update``: a failed read aborts the mutation with
``StorageError`` instead of writing back a list it never saw, and records that
could not be parsed are written back unchanged.

The store is the source of truth. If saving fails the scheduler is not touched;
if replanning fails after a successful save, the error is logged and the
mutation still stands. There is no locking around the load/save cycle, so two
interleaved mutations can lose one of the updates.
"""

from datetime import datetime
from typing import Optional

import config
from logger import logger
from .completion import is_completed_on_date, toggle_completion
from .lifecycle import on_reminder_created_or_updated, on_reminder_deleted, reinitialize_all
from .models import Recurrence, RecurrenceType, Reminder, ensure_aware, new_reminder, validate_reminder_input
from .recurrence import is_due_on_date, to_local
from .scheduler import NotificationScheduler
from .store import ReminderStore

# Sentinel for edit fields the caller did not touch
UNCHANGED = object()


async def create_reminder(
    store: ReminderStore,
    scheduler: NotificationScheduler,
    title: str,
    due_date: datetime,
    recurrence: Optional[Recurrence] = None,
    now: datetime = None
) -> Reminder:
    """Create, persist and schedule a new reminder.

    Raises:
        ValueError: If the title or recurrence is invalid
        StorageError: If the reminder could not be saved
    """
    reminder = new_reminder(title, due_date, recurrence=recurrence, now=now)

    reminders, unreadable = await store.load_for_update()
    await store.save_all(reminders + [reminder], unreadable)
    logger.info(f"Created reminder {reminder.id}: '{reminder.title}' due {reminder.due_date}")

    _replan(scheduler, reminder, now)
    return reminder


async def update_reminder(
    store: ReminderStore,
    scheduler: NotificationScheduler,
    updated: Reminder,
    now: datetime = None
) -> Optional[Reminder]:
    """Replace the stored record with the same ID as ``updated``.

    Returns:
        The stored record, or None if no reminder has that ID

    Raises:
        StorageError: If the update could not be saved
    """
    reminders, unreadable = await store.load_for_update()
    if not any(r.id == updated.id for r in reminders):
        logger.warning(f"Update for unknown reminder {updated.id} ignored")
        return None

    await _replace(store, scheduler, reminders, unreadable, updated, now)
    return updated


async def edit_reminder(
    store: ReminderStore,
    scheduler: NotificationScheduler,
    reminder_id: str,
    title: Optional[str] = None,
    due_date: Optional[datetime] = None,
    recurrence=UNCHANGED,
    now: datetime = None
) -> Optional[Reminder]:
    """Change the title, due date or recurrence of a stored reminder.

    Fields left as None (``UNCHANGED`` for recurrence) keep their stored value.
    Pass ``recurrence=None`` to make a reminder single-shot.

    Returns:
        The new record, or None if no reminder has that ID

    Raises:
        ValueError: If the new title or recurrence is invalid
        StorageError: If the change could not be saved
    """
    reminders, unreadable = await store.load_for_update()
    reminder = next((r for r in reminders if r.id == reminder_id), None)
    if reminder is None:
        return None

    changes = {}
    if due_date is not None:
        changes["due_date"] = ensure_aware(due_date)
    if recurrence is not UNCHANGED:
        changes["recurrence"] = recurrence
    changes["title"] = validate_reminder_input(
        reminder.title if title is None else title,
        changes.get("recurrence", reminder.recurrence),
    )

    updated = reminder.with_changes(**changes)
    await _replace(store, scheduler, reminders, unreadable, updated, now)
    return updated


async def toggle_reminder_completion(
    store: ReminderStore,
    scheduler: NotificationScheduler,
    reminder_id: str,
    date: datetime = None,
    now: datetime = None
) -> Optional[Reminder]:
    """Flip completion of the occurrence on ``date`` (defaults to now).

    Returns:
        The new record, or None if no reminder has that ID

    Raises:
        StorageError: If the change could not be saved
    """
    date = date or datetime.now(config.LOCAL_TZ)

    reminders, unreadable = await store.load_for_update()
    reminder = next((r for r in reminders if r.id == reminder_id), None)
    if reminder is None:
        return None

    toggled = toggle_completion(reminder, date)
    await store.save_all([toggled if r.id == reminder_id else r for r in reminders], unreadable)
    logger.info(
        f"Toggled {reminder_id} on {to_local(date).date()}: "
        f"completed={is_completed_on_date(toggled, date)}"
    )

    _replan(scheduler, toggled, now)
    return toggled


async def delete_reminder(
    store: ReminderStore,
    scheduler: NotificationScheduler,
    reminder_id: str
) -> bool:
    """Delete a reminder and cancel its notifications.

    Returns:
        True if a reminder was deleted

    Raises:
        StorageError: If the deletion could not be saved
    """
    reminders, unreadable = await store.load_for_update()
    remaining = [r for r in reminders if r.id != reminder_id]
    if len(remaining) == len(reminders):
        return False

    await store.save_all(remaining, unreadable)
    logger.info(f"Deleted reminder {reminder_id}")

    try:
        on_reminder_deleted(scheduler, reminder_id)
    except Exception as e:
        logger.error(f"Failed to cancel notifications for {reminder_id}: {e}")
    return True


async def reminders_for_date(store: ReminderStore, date: datetime) -> list[tuple[Reminder, bool]]:
    """List reminders due on ``date``'s local day with their completion state.

    Returns:
        (reminder, completed) pairs ordered by local time of day
    """
    reminders = await store.load()
    due = [r for r in reminders if is_due_on_date(r, date)]
    due.sort(key=lambda r: to_local(r.due_date).time())
    return [(r, is_completed_on_date(r, date)) for r in due]


async def reload_reminders_on_startup(
    store: ReminderStore,
    scheduler: NotificationScheduler,
    now: datetime = None
) -> int:
    """Rebuild every notification job from the store.

    Returns:
        Count of triggers registered
    """
    reminders = await store.load()
    return reinitialize_all(scheduler, reminders, now=now)


async def refresh_custom_plans(
    store: ReminderStore,
    scheduler: NotificationScheduler,
    now: datetime = None
) -> int:
    """Replan every custom recurrence so its trigger horizon keeps moving forward.

    Returns:
        Count of triggers registered
    """
    reminders = await store.load()
    total = 0
    for reminder in reminders:
        if reminder.is_recurring and reminder.recurrence.type == RecurrenceType.CUSTOM:
            try:
                total += on_reminder_created_or_updated(scheduler, reminder, now=now)
            except Exception as e:
                logger.error(f"Failed to refresh notifications for {reminder.id}: {e}")
    logger.info(f"Refreshed custom recurrence plans ({total} triggers)")
    return total


async def _replace(
    store: ReminderStore,
    scheduler: NotificationScheduler,
    reminders: list[Reminder],
    unreadable: list,
    updated: Reminder,
    now: Optional[datetime]
) -> None:
    await store.save_all([updated if r.id == updated.id else r for r in reminders], unreadable)
    logger.info(f"Updated reminder {updated.id}")
    _replan(scheduler, updated, now)


def _replan(scheduler: NotificationScheduler, reminder: Reminder, now: Optional[datetime]) -> None:
    """Replan triggers after a successful save; failures leave the stored state in place."""
    try:
        on_reminder_created_or_updated(scheduler, reminder, now=now)
    except Exception as e:
        logger.error(f"Failed to schedule notifications for {reminder.id}: {e}")
