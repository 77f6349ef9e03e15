"""
Schedule steps.

``schedule/cron`` is emitted by the timer and fans out one
``schedule/trigger-manual`` per due schedule. ``schedule/trigger-manual``
queues generation of the site's next draft articles.
"""
from datetime import datetime, timedelta
import logging
from typing import List, Optional

from core.domain.entities import utc_now
from core.domain.enums import ArticleStatus, PublishMode
from core.domain.exceptions import NonRetriableError
from orchestration.events import SCHEDULE_TRIGGER_MANUAL, Event
from orchestration.models import StepContext

from .analyze_product import generate_event
from .dependencies import StepDependencies


logger = logging.getLogger(__name__)

DEFAULT_CRON = "0 9 * * *"
DEFAULT_HOUR = 9


def _parse_int(value: str, default: int, upper: int) -> int:
    try:
        number = int(value)
    except ValueError:
        return default
    return number if 0 <= number <= upper else default


def next_run_at(cron_expression: Optional[str], after: Optional[datetime] = None) -> datetime:
    """
    Next run time for a daily "minute hour * * day-of-week" expression.

    Runs at most once a day: the result is on a later day than ``after``,
    at the given hour and minute, on the first allowed weekday (0 is
    Sunday). Expressions that do not have five fields run 24 hours later.
    """
    after = after or utc_now()
    parts = (cron_expression or DEFAULT_CRON).split()
    if len(parts) != 5:
        return after + timedelta(hours=24)

    minute, hour, _, _, day_of_week = parts
    candidate = (after + timedelta(days=1)).replace(
        hour=_parse_int(hour, DEFAULT_HOUR, 23),
        minute=_parse_int(minute, 0, 59),
        second=0,
        microsecond=0,
    )

    if day_of_week != "*":
        days = (_parse_int(day, -1, 7) for day in day_of_week.split(","))
        allowed = {day % 7 for day in days if day >= 0}
        for _ in range(7 if allowed else 0):
            if (candidate.weekday() + 1) % 7 in allowed:
                break
            candidate += timedelta(days=1)
    return candidate


class TriggerScheduleStep:
    name = "trigger-schedule"

    def __init__(self, deps: StepDependencies):
        self._store = deps.store

    async def run(self, ctx: StepContext) -> List[Event]:
        schedule_id = ctx.require("scheduleId")
        schedule = await self._store.schedules.get(schedule_id)
        if schedule is None:
            raise NonRetriableError(f"Schedule not found: {schedule_id}")
        if not schedule.is_active:
            logger.info(f"Schedule {schedule.id} is inactive, nothing to run")
            return []

        drafts = await self._store.articles.list_by_status(
            ArticleStatus.DRAFT, site_id=schedule.site_id, limit=schedule.articles_per_run
        )
        auto_publish = schedule.publish_mode == PublishMode.PUBLISH

        now = utc_now()
        schedule.last_run_at = now
        schedule.next_run_at = next_run_at(schedule.cron_expression, now)
        await self._store.schedules.update(schedule)

        logger.info(
            f"Schedule {schedule.id} queued {len(drafts)} article(s), next run {schedule.next_run_at}"
        )
        return [generate_event(article, auto_publish=auto_publish) for article in drafts]


class RunDueSchedulesStep:
    name = "run-due-schedules"

    def __init__(self, deps: StepDependencies):
        self._store = deps.store

    async def run(self, ctx: StepContext) -> List[Event]:
        now = utc_now()
        due = await self._store.schedules.list_due(now)
        events = []
        for schedule in due:
            # Advanced here so the next tick does not pick it up again
            schedule.next_run_at = next_run_at(schedule.cron_expression, now)
            await self._store.schedules.update(schedule)
            events.append(Event.create(SCHEDULE_TRIGGER_MANUAL, {"scheduleId": schedule.id}))
        if events:
            logger.info(f"Triggering {len(events)} due schedule(s)")
        return events
