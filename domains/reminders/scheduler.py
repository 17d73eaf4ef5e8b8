"""Register notification triggers as APScheduler jobs."""

import uuid
from typing import Awaitable, Callable

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

import config
from logger import logger
from .planner import (
    AtTrigger,
    DailyTrigger,
    MonthlyTrigger,
    RepeatEveryTrigger,
    TriggerSpec,
    WeeklyTrigger,
)

# Every notification job ID starts with this, so unrelated jobs on the same scheduler are left alone
JOB_PREFIX = "notify"

# Late-firing jobs still deliver within this many seconds
MISFIRE_GRACE_SECONDS = 60

DeliverFunc = Callable[..., Awaitable]


class SchedulerError(Exception):
    """A trigger could not be registered."""


class NotificationScheduler:
    """Schedules, lists and cancels tagged notification jobs.

    Each job calls ``deliver(reminder_id=..., title=..., body=...)`` when it fires.
    """

    def __init__(self, scheduler: BaseScheduler, deliver: DeliverFunc):
        """Initialize the notification scheduler.

        Args:
            scheduler: APScheduler instance (started or not)
            deliver: Async function that shows the notification
        """
        self._scheduler = scheduler
        self._deliver = deliver

    def schedule(self, spec: TriggerSpec) -> str:
        """Register one trigger.

        Returns:
            Handle (job ID) for cancellation

        Raises:
            SchedulerError: If the trigger could not be registered
        """
        job_id = f"{JOB_PREFIX}:{spec.tag}:{uuid.uuid4().hex[:12]}"
        try:
            job = self._scheduler.add_job(
                self._deliver,
                trigger=_to_apscheduler_trigger(spec),
                kwargs={
                    "reminder_id": spec.tag,
                    "title": spec.content.title,
                    "body": spec.content.body,
                },
                id=job_id,
                name=f"reminder:{spec.content.title[:30]}",
                misfire_grace_time=MISFIRE_GRACE_SECONDS,
                coalesce=True,
            )
        except Exception as e:
            raise SchedulerError(f"Failed to schedule trigger for {spec.tag}: {e}") from e
        return job.id

    def cancel(self, handle: str) -> bool:
        """Cancel one trigger. Returns False if it no longer exists."""
        try:
            self._scheduler.remove_job(handle)
            return True
        except JobLookupError:
            logger.warning(f"Notification job {handle} already gone")
            return False

    def list_scheduled(self) -> list[tuple[str, str]]:
        """List (handle, tag) for every scheduled notification job."""
        return [
            (job.id, job.kwargs.get("reminder_id"))
            for job in self._scheduler.get_jobs()
            if job.id.startswith(f"{JOB_PREFIX}:")
        ]

    def cancel_tag(self, tag: str) -> int:
        """Cancel every trigger tagged with ``tag``. Returns the count cancelled."""
        cancelled = 0
        for handle, job_tag in self.list_scheduled():
            if job_tag == tag and self.cancel(handle):
                cancelled += 1
        return cancelled

    def cancel_all(self) -> int:
        """Cancel every notification job. Returns the count cancelled."""
        cancelled = 0
        for handle, _ in self.list_scheduled():
            if self.cancel(handle):
                cancelled += 1
        return cancelled


def _to_apscheduler_trigger(spec: TriggerSpec):
    """Map a trigger spec onto the matching APScheduler trigger."""
    tz = config.LOCAL_TZ
    if isinstance(spec, AtTrigger):
        return DateTrigger(run_date=spec.at, timezone=tz)
    if isinstance(spec, RepeatEveryTrigger):
        return IntervalTrigger(seconds=int(spec.every.total_seconds()), timezone=tz)
    if isinstance(spec, DailyTrigger):
        return CronTrigger(
            hour=spec.at_time.hour, minute=spec.at_time.minute, second=spec.at_time.second,
            start_date=spec.start, timezone=tz
        )
    if isinstance(spec, WeeklyTrigger):
        return CronTrigger(
            day_of_week=spec.weekday,
            hour=spec.at_time.hour, minute=spec.at_time.minute, second=spec.at_time.second,
            start_date=spec.start, timezone=tz
        )
    if isinstance(spec, MonthlyTrigger):
        # Months without this day are skipped by the cron trigger
        return CronTrigger(
            day=spec.day_of_month,
            hour=spec.at_time.hour, minute=spec.at_time.minute, second=spec.at_time.second,
            start_date=spec.start, timezone=tz
        )
    raise SchedulerError(f"Unsupported trigger spec: {type(spec).__name__}")
