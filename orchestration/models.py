"""Orchestration models - StepContext, StepResult."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from core.domain.entities import Job
from core.domain.enums import JobStatus
from core.domain.exceptions import NonRetriableError
from core.domain.value_objects import ExecutionID

from .events import Event

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class StepContext:
    """What a step function sees for one attempt."""

    job: Job
    event: Event
    execution_id: ExecutionID
    attempt: int
    sleep: Sleep

    @property
    def payload(self) -> dict[str, object]:
        return self.event.payload

    def require(self, key: str) -> str:
        """Return a required payload field as a string."""
        value = self.event.payload.get(key)
        if value is None or value == "":
            raise NonRetriableError(f"Event {self.event.name} is missing '{key}'")
        return str(value)


@dataclass
class StepResult:
    """Outcome of handling one event."""

    name: str
    job_id: str
    status: JobStatus
    attempts: int
    duration_ms: int
    error: str | None = None
    emitted: list[Event] = field(default_factory=list)
    skipped: bool = False

    @property
    def success(self) -> bool:
        return self.status == JobStatus.COMPLETED
