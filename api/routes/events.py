"""
Event endpoints.

Publishes a trigger event for the orchestrator to run.
"""
from typing import Any, Dict
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from api.dependencies import get_event_bus
from orchestration.bus import EventPublisher
from orchestration.events import TRIGGER_EVENTS, Event


logger = logging.getLogger(__name__)
router = APIRouter()


class PublishEventRequest(BaseModel):
    name: str
    payload: Dict[str, Any] = Field(default_factory=dict)


@router.post(
    "",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Publish a trigger event",
)
async def publish_event(
    request: PublishEventRequest,
    bus: EventPublisher = Depends(get_event_bus),
):
    """
    Publish a trigger event.

    **Returns:**
    - `eventId` of the published event; its job can be looked up by the
      id returned in follow-up responses
    """
    if request.name not in TRIGGER_EVENTS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown event: {request.name}",
        )

    event = Event.create(request.name, request.payload)
    await bus.publish(event)
    logger.info(f"Accepted {event.name} ({event.metadata.event_id})")
    return {"accepted": True, "name": event.name, "eventId": event.metadata.event_id}
