"""
Schedule endpoints.

Create schedules, switch them on and off, and run them on demand.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from api.dependencies import get_event_bus, get_record_store
from core.application.workflows import next_run_at
from core.domain.entities import Schedule, utc_now
from core.domain.enums import PublishMode
from core.domain.repositories import RecordStore
from orchestration.bus import EventPublisher
from orchestration.events import SCHEDULE_TRIGGER_MANUAL, Event


logger = logging.getLogger(__name__)
router = APIRouter()


class CreateScheduleRequest(BaseModel):
    site_id: str = Field(..., alias="siteId")
    cron_expression: str = Field("0 9 * * *", alias="cronExpression")
    articles_per_run: int = Field(1, alias="articlesPerRun", ge=1, le=10)
    publish_mode: PublishMode = Field(PublishMode.DRAFT, alias="publishMode")


def schedule_to_dict(schedule: Schedule) -> dict:
    return {
        "id": schedule.id,
        "siteId": schedule.site_id,
        "cronExpression": schedule.cron_expression,
        "articlesPerRun": schedule.articles_per_run,
        "publishMode": schedule.publish_mode.value,
        "isActive": schedule.is_active,
        "nextRunAt": schedule.next_run_at.isoformat() if schedule.next_run_at else None,
        "lastRunAt": schedule.last_run_at.isoformat() if schedule.last_run_at else None,
    }


async def _get_schedule(store: RecordStore, schedule_id: str) -> Schedule:
    schedule = await store.schedules.get(schedule_id)
    if schedule is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule not found")
    return schedule


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a schedule")
async def create_schedule(
    request: CreateScheduleRequest,
    store: RecordStore = Depends(get_record_store),
):
    if await store.sites.get(request.site_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Site not found")

    schedule = await store.schedules.add(
        Schedule(
            site_id=request.site_id,
            cron_expression=request.cron_expression,
            articles_per_run=request.articles_per_run,
            publish_mode=request.publish_mode,
            next_run_at=next_run_at(request.cron_expression, utc_now()),
        )
    )
    logger.info(f"Created schedule {schedule.id} for site {schedule.site_id}")
    return schedule_to_dict(schedule)


@router.post("/{schedule_id}/toggle", summary="Switch a schedule on or off")
async def toggle_schedule(schedule_id: str, store: RecordStore = Depends(get_record_store)):
    schedule = await _get_schedule(store, schedule_id)
    schedule.is_active = not schedule.is_active
    schedule.next_run_at = next_run_at(schedule.cron_expression, utc_now()) if schedule.is_active else None
    schedule = await store.schedules.update(schedule)
    return {"success": True, "isActive": schedule.is_active}


@router.post("/{schedule_id}/trigger", summary="Run a schedule now")
async def trigger_schedule(
    schedule_id: str,
    store: RecordStore = Depends(get_record_store),
    bus: EventPublisher = Depends(get_event_bus),
):
    schedule = await _get_schedule(store, schedule_id)
    await bus.publish(Event.create(SCHEDULE_TRIGGER_MANUAL, {"scheduleId": schedule.id}))
    return {"success": True, "status": "triggered"}
