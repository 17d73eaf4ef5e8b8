"""Reminder entity, recurrence rule and completion state.

A reminder is either single-shot or recurring, selected by the presence of
``recurrence``. The two kinds track completion differently:

- single-shot: ``SingleShotCompletion(completed, completed_at)``
- recurring:   ``RecurringCompletion(completed_dates)``, one timestamp per
  completed occurrence

Records are immutable; every mutation builds a new record with
``dataclasses.replace``.
"""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from dateutil.parser import parse as parse_datetime

import config


class RecurrenceType(str, Enum):
    """How a reminder repeats."""
    DAILY = "daily"
    WEEKLY = "weekly"      # Same weekday as the anchor
    MONTHLY = "monthly"    # Same day-of-month as the anchor
    CUSTOM = "custom"      # Every N days from the anchor


@dataclass(frozen=True)
class Recurrence:
    """Recurrence rule anchored to the reminder's due date."""
    type: RecurrenceType
    custom_days: Optional[int] = None

    @property
    def interval_days(self) -> int:
        """Step for custom recurrences, never below one day."""
        return max(self.custom_days or 1, 1)


@dataclass(frozen=True)
class SingleShotCompletion:
    """Completion state of a non-recurring reminder."""
    completed: bool = False
    completed_at: Optional[datetime] = None


@dataclass(frozen=True)
class RecurringCompletion:
    """Completion state of a recurring reminder."""
    completed_dates: tuple[datetime, ...] = ()


CompletionState = Union[SingleShotCompletion, RecurringCompletion]


@dataclass(frozen=True)
class Reminder:
    """A reminder record as persisted in the store."""
    id: str
    title: str
    due_date: datetime
    created_at: datetime
    recurrence: Optional[Recurrence] = None
    completion: CompletionState = None

    def __post_init__(self):
        # Default the completion variant from the recurrence, and refuse a mismatch
        if self.completion is None:
            default = RecurringCompletion() if self.recurrence else SingleShotCompletion()
            object.__setattr__(self, "completion", default)
        elif self.is_recurring != isinstance(self.completion, RecurringCompletion):
            raise ValueError(f"Completion state {type(self.completion).__name__} does not match recurrence")

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not None

    @property
    def completed(self) -> bool:
        """Single-shot completion flag (always False for recurring reminders)."""
        return isinstance(self.completion, SingleShotCompletion) and self.completion.completed

    @property
    def completed_dates(self) -> tuple[datetime, ...]:
        if isinstance(self.completion, RecurringCompletion):
            return self.completion.completed_dates
        return ()

    def with_changes(self, **changes) -> "Reminder":
        """Return a full replacement record.

        Changing ``recurrence`` between single-shot and recurring resets the
        completion state to the matching variant.
        """
        if "recurrence" in changes and "completion" not in changes:
            if (changes["recurrence"] is not None) != self.is_recurring:
                changes["completion"] = None
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Serialize to the persisted JSON shape."""
        data = {
            "id": self.id,
            "title": self.title,
            "dueDate": self.due_date.isoformat(),
            "createdAt": self.created_at.isoformat(),
            "completed": self.completed,
        }
        if isinstance(self.completion, SingleShotCompletion) and self.completion.completed_at:
            data["completedAt"] = self.completion.completed_at.isoformat()
        if self.recurrence:
            data["recurrence"] = {"type": self.recurrence.type.value}
            if self.recurrence.type == RecurrenceType.CUSTOM:
                data["recurrence"]["customDays"] = self.recurrence.custom_days
            data["completedDates"] = [d.isoformat() for d in self.completed_dates]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Reminder":
        """Build a reminder from its persisted JSON shape.

        Raises:
            KeyError, TypeError, ValueError: if the record is malformed
        """
        title = data["title"]
        if not isinstance(title, str) or not title.strip():
            raise ValueError("Reminder title must be a non-empty string")

        recurrence = None
        raw_recurrence = data.get("recurrence")
        if raw_recurrence:
            custom_days = raw_recurrence.get("customDays")
            recurrence = Recurrence(
                type=RecurrenceType(raw_recurrence["type"]),
                custom_days=int(custom_days) if custom_days is not None else None,
            )

        # Only the fields of the active variant are read
        if recurrence:
            completion = RecurringCompletion(
                completed_dates=tuple(_parse_timestamp(d) for d in data.get("completedDates") or [])
            )
        else:
            completed_at = data.get("completedAt")
            completion = SingleShotCompletion(
                completed=bool(data.get("completed", False)),
                completed_at=_parse_timestamp(completed_at) if completed_at else None,
            )

        return cls(
            id=str(data["id"]),
            title=title,
            due_date=_parse_timestamp(data["dueDate"]),
            created_at=_parse_timestamp(data["createdAt"]),
            recurrence=recurrence,
            completion=completion,
        )


def new_reminder(
    title: str,
    due_date: datetime,
    recurrence: Optional[Recurrence] = None,
    now: datetime = None
) -> Reminder:
    """Create a new reminder with a fresh ID.

    Args:
        title: Display title (trimmed, must not be empty)
        due_date: Due instant, or the anchor of a recurring series
        recurrence: Optional recurrence rule
        now: Creation time (defaults to now in the local timezone)

    Raises:
        ValueError: On an empty title or a custom recurrence without a valid day count
    """
    return Reminder(
        id=f"remind_{uuid.uuid4().hex[:8]}",
        title=validate_reminder_input(title, recurrence),
        due_date=ensure_aware(due_date),
        created_at=now or datetime.now(config.LOCAL_TZ),
        recurrence=recurrence,
    )


def validate_reminder_input(title: str, recurrence: Optional[Recurrence]) -> str:
    """Check user-supplied fields and return the trimmed title.

    Raises:
        ValueError: On an empty title or a custom recurrence without a valid day count
    """
    title = (title or "").strip()
    if not title:
        raise ValueError("Please enter a title for the reminder")
    if recurrence and recurrence.type == RecurrenceType.CUSTOM:
        if not recurrence.custom_days or recurrence.custom_days < 1:
            raise ValueError("Please enter a valid number of days for custom recurrence")
    return title


def ensure_aware(value: datetime) -> datetime:
    """Interpret naive datetimes in the local timezone."""
    if value.tzinfo is None:
        return value.replace(tzinfo=config.LOCAL_TZ)
    return value


def _parse_timestamp(value: str) -> datetime:
    if not isinstance(value, str):
        raise TypeError(f"Expected an ISO timestamp string, got {type(value).__name__}")
    return ensure_aware(parse_datetime(value))
