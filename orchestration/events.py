"""Orchestration events - Event, EventMetadata and the trigger event names."""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

SITE_PROVISION = "site/provision"
PRODUCT_ANALYZE = "product/analyze"
ARTICLE_GENERATE = "article/generate"
PUBLISH_SYNC = "publish/sync"
SCHEDULE_TRIGGER_MANUAL = "schedule/trigger-manual"
SCHEDULE_CRON = "schedule/cron"

TRIGGER_EVENTS = (
    SITE_PROVISION,
    PRODUCT_ANALYZE,
    ARTICLE_GENERATE,
    PUBLISH_SYNC,
    SCHEDULE_TRIGGER_MANUAL,
    SCHEDULE_CRON,
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class EventMetadata:
    """Metadata for an event.

    ``job_id`` is set when the emitter already created the Job the event
    belongs to; otherwise the orchestrator creates one.
    """

    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=_utc_now)
    job_id: str | None = None
    execution_id: str | None = None


@dataclass(frozen=True)
class Event:
    """Immutable named message that triggers a workflow step."""

    name: str
    payload: dict[str, object]
    metadata: EventMetadata = field(default_factory=EventMetadata)

    @classmethod
    def create(
        cls, name: str, payload: dict[str, object], job_id: str | None = None
    ) -> "Event":
        return cls(name=name, payload=dict(payload), metadata=EventMetadata(job_id=job_id))

    def to_message(self) -> dict[str, str]:
        """Flatten to string fields for a Redis Stream entry."""
        return {
            "name": self.name,
            "payload": json.dumps(self.payload, default=str),
            "event_id": self.metadata.event_id,
            "job_id": self.metadata.job_id or "",
            "execution_id": self.metadata.execution_id or "",
            "timestamp": self.metadata.timestamp.isoformat(),
        }

    @classmethod
    def from_message(cls, data: dict[str, str]) -> "Event":
        return cls(
            name=data["name"],
            payload=json.loads(data.get("payload") or "{}"),
            metadata=EventMetadata(
                event_id=data["event_id"],
                timestamp=datetime.fromisoformat(data["timestamp"]),
                job_id=data.get("job_id") or None,
                execution_id=data.get("execution_id") or None,
            ),
        )
