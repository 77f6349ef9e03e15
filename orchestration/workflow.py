"""Workflow definitions - RetryPolicy, StepRegistration."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from core.domain.enums import JobKind

from .events import Event
from .models import StepContext

# A step returns the follow-on events to publish once it has succeeded
StepFunction = Callable[[StepContext], Awaitable[list[Event] | None]]
FailureHook = Callable[[StepContext, BaseException], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with a fixed backoff schedule."""

    max_attempts: int = 3
    backoff_seconds: tuple[float, ...] = (60.0, 300.0, 900.0)

    def delay_for(self, attempt: int) -> float:
        """Delay to wait after failed attempt number `attempt` (1-based)."""
        if not self.backoff_seconds:
            return 0.0
        index = min(attempt - 1, len(self.backoff_seconds) - 1)
        return self.backoff_seconds[index]


@dataclass(frozen=True)
class StepRegistration:
    """Binds trigger event names to one step function.

    ``key_field`` names the payload field identifying the entity the job
    works on; events with the same kind and key are handled in order.
    ``on_failure`` applies the domain status change once retries are
    exhausted.
    """

    name: str
    events: tuple[str, ...]
    job_kind: JobKind
    step: StepFunction
    key_field: str | None = None
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    on_failure: FailureHook | None = None

    def job_key(self, event: Event) -> str:
        if self.key_field:
            value = event.payload.get(self.key_field)
            if value:
                return str(value)
        return event.metadata.event_id
