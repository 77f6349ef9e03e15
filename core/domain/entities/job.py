"""Job - audit record of one unit of orchestrated work."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..enums import JobKind, JobStatus
from ..value_objects import new_id


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


TERMINAL_JOB_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})


@dataclass
class Job:
    """
    One unit of orchestrated work.

    Created pending, moved to processing when a step starts, and finished
    as completed or failed. Jobs are never deleted.
    """

    kind: JobKind
    payload: Dict[str, Any]
    key: str
    id: str = field(default_factory=new_id)
    status: JobStatus = JobStatus.PENDING
    event_id: Optional[str] = None
    retry_count: int = 0
    error: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    completed_at: Optional[datetime] = None
    # Follow-on events of a step that succeeded, kept until they are published
    outbox: List[Dict[str, str]] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_JOB_STATUSES

    def _touch(self) -> None:
        self.updated_at = utc_now()

    def mark_processing(self) -> None:
        if self.is_terminal:
            raise ValueError(f"Job {self.id} is already {self.status.value}")
        self.status = JobStatus.PROCESSING
        self._touch()

    def record_retry(self, error: str) -> None:
        self.retry_count += 1
        self.error = error
        self._touch()

    def stage_events(self, messages: List[Dict[str, str]]) -> None:
        self.outbox = list(messages)
        self._touch()

    def mark_completed(self) -> None:
        self.status = JobStatus.COMPLETED
        self.error = None
        self.outbox = []
        self.completed_at = utc_now()
        self._touch()

    def mark_failed(self, error: str) -> None:
        self.status = JobStatus.FAILED
        self.error = error
        self.completed_at = utc_now()
        self._touch()
