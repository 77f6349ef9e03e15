"""Orchestrator - dispatches trigger events to step functions with retry and job tracking."""

import asyncio
from collections.abc import Iterable

from blogforge_sdk.logging import get_logger
from core.domain.entities import Job, utc_now
from core.domain.enums import JobStatus
from core.domain.exceptions import NonRetriableError, RecordNotFoundError, RecordStoreIntegrityError
from core.domain.repositories import JobRepository
from core.domain.value_objects import ExecutionID

from .bus import EventPublisher, EventSubscriber
from .events import Event
from .models import Sleep, StepContext, StepResult
from .registry import StepRegistry
from .workflow import StepRegistration

FATAL_ERRORS = (NonRetriableError, RecordStoreIntegrityError)


class Orchestrator:
    """Runs the registered step for each trigger event.

    Job lifecycle: pending -> processing -> completed | failed. A step is
    retried per its RetryPolicy; NonRetriableError and record store
    integrity errors fail the job at once. Follow-on events of a
    successful step are staged on the job first, then published, and only
    then is the job completed; a redelivered event that finds staged
    events publishes them again instead of rerunning the step. Events
    sharing a job kind and key are handled one at a time, in arrival order.
    """

    def __init__(
        self,
        registry: StepRegistry,
        jobs: JobRepository,
        event_bus: EventPublisher,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize orchestrator.

        Args:
            registry: Step registry built at start-up
            jobs: Job repository used as the audit trail
            event_bus: Bus follow-on events are published to
            sleep: Awaitable used for backoff and batch polling
        """
        self._registry = registry
        self._jobs = jobs
        self._event_bus = event_bus
        self._sleep = sleep
        self._key_locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._logger = get_logger("orchestration.orchestrator")

    @property
    def registry(self) -> StepRegistry:
        return self._registry

    def subscribe_to(self, bus: EventSubscriber) -> None:
        """Subscribe `handle` to every registered trigger event."""
        for event_name in self._registry.event_names:
            bus.subscribe(event_name, self._handle_from_bus)

    async def _handle_from_bus(self, event: Event) -> None:
        await self.handle(event)

    async def handle(self, event: Event) -> StepResult | None:
        """Handle one trigger event.

        Returns:
            StepResult, or None when no step is registered for the event
        """
        registration = self._registry.resolve(event.name)
        if registration is None:
            self._logger.warning(f"No step registered for event {event.name}")
            return None

        lock_key = f"{registration.job_kind.value}:{registration.job_key(event)}"
        lock = self._key_locks.setdefault(lock_key, asyncio.Lock())
        self._lock_users[lock_key] = self._lock_users.get(lock_key, 0) + 1
        try:
            async with lock:
                result = await self._run(registration, event)
        finally:
            self._lock_users[lock_key] -= 1
            if self._lock_users[lock_key] == 0:
                del self._lock_users[lock_key]
                del self._key_locks[lock_key]

        if result.emitted:
            await self._emit(result.emitted)
            result.status = await self._complete(result.job_id)
        return result

    async def _resolve_job(self, registration: StepRegistration, event: Event) -> Job:
        job: Job | None = None
        if event.metadata.job_id:
            job = await self._jobs.get(event.metadata.job_id)
        if job is None:
            job = await self._jobs.find_by_event_id(event.metadata.event_id)
        if job is None:
            job = Job(
                kind=registration.job_kind,
                payload=dict(event.payload),
                key=registration.job_key(event),
                event_id=event.metadata.event_id,
            )
            if event.metadata.job_id:
                job.id = event.metadata.job_id
            job = await self._jobs.add(job)
        return job

    async def _run(self, registration: StepRegistration, event: Event) -> StepResult:
        started_at = utc_now()
        job = await self._resolve_job(registration, event)

        if job.is_terminal:
            self._logger.info(
                f"Skipping {event.name} ({event.metadata.event_id}): "
                f"job {job.id} is already {job.status.value}"
            )
            return StepResult(
                name=registration.name,
                job_id=job.id,
                status=job.status,
                attempts=0,
                duration_ms=0,
                error=job.error,
                skipped=True,
            )

        if job.outbox:
            self._logger.info(
                f"Job {job.id} already ran; publishing its {len(job.outbox)} staged event(s) again"
            )
            return StepResult(
                name=registration.name,
                job_id=job.id,
                status=job.status,
                attempts=0,
                duration_ms=0,
                emitted=[Event.from_message(message) for message in job.outbox],
                skipped=True,
            )

        job.mark_processing()
        job = await self._jobs.update(job)
        execution_id = ExecutionID.generate()
        policy = registration.retry_policy

        self._logger.info(
            f"[{execution_id}] Running step {registration.name} for job {job.id} "
            f"(event={event.name}, key={job.key})"
        )

        attempts = 0
        emitted: list[Event] = []
        last_error: BaseException | None = None
        ctx = StepContext(job=job, event=event, execution_id=execution_id, attempt=1, sleep=self._sleep)

        for attempt in range(1, policy.max_attempts + 1):
            attempts = attempt
            ctx = StepContext(
                job=job, event=event, execution_id=execution_id, attempt=attempt, sleep=self._sleep
            )
            try:
                emitted = list(await registration.step(ctx) or [])
                last_error = None
                break
            except FATAL_ERRORS as exc:
                last_error = exc
                self._logger.error(
                    f"[{execution_id}] Step {registration.name} failed permanently: {exc}"
                )
                break
            except Exception as exc:
                last_error = exc
                if attempt >= policy.max_attempts:
                    self._logger.error(
                        f"[{execution_id}] Step {registration.name} failed after "
                        f"{attempt} attempt(s): {exc}",
                        exc_info=True,
                    )
                    break
                delay = policy.delay_for(attempt)
                job.record_retry(str(exc))
                job = await self._jobs.update(job)
                self._logger.warning(
                    f"[{execution_id}] Step {registration.name} attempt {attempt}/"
                    f"{policy.max_attempts} failed: {exc}; retrying in {delay:.0f}s"
                )
                await self._sleep(delay)

        duration_ms = int((utc_now() - started_at).total_seconds() * 1000)

        if last_error is None:
            if emitted:
                job.stage_events([e.to_message() for e in emitted])
            else:
                job.mark_completed()
            job = await self._jobs.update(job)
            self._logger.info(
                f"[{execution_id}] ✅ Step {registration.name} succeeded for job {job.id} "
                f"in {attempts} attempt(s), emitting {len(emitted)} event(s)"
            )
            return StepResult(
                name=registration.name,
                job_id=job.id,
                status=job.status,
                attempts=attempts,
                duration_ms=duration_ms,
                emitted=emitted,
            )

        error_str = f"{type(last_error).__name__}: {last_error}"
        job.mark_failed(error_str)
        job = await self._jobs.update(job)
        self._logger.error(f"[{execution_id}] ❌ Job {job.id} failed: {error_str}")

        if registration.on_failure is not None:
            try:
                await registration.on_failure(ctx, last_error)
            except Exception as hook_exc:
                self._logger.error(
                    f"[{execution_id}] Failure hook of {registration.name} raised: {hook_exc}",
                    exc_info=True,
                )

        return StepResult(
            name=registration.name,
            job_id=job.id,
            status=job.status,
            attempts=attempts,
            duration_ms=duration_ms,
            error=error_str,
        )

    async def _emit(self, events: Iterable[Event]) -> None:
        await asyncio.gather(*(self._event_bus.publish(event) for event in events))

    async def _complete(self, job_id: str) -> JobStatus:
        job = await self._jobs.get(job_id)
        if job is None:
            raise RecordNotFoundError("Job", job_id)
        if not job.is_terminal:
            job.mark_completed()
            job = await self._jobs.update(job)
            self._logger.info(f"✅ Job {job.id} completed")
        return job.status
