"""
Batch runner - submit, poll and collect Claude batches from a workflow step.

The runner polls on a backoff schedule using the sleep supplied by the
orchestrator, so tests can drive it without waiting.
"""
from collections.abc import Awaitable, Callable, Sequence
import logging

from blogforge_sdk.llm import BatchRequest, BatchResultItem, BatchStatus, ClaudeBatchClient
from core.domain.exceptions import RetryableStepError


logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class BatchTimeoutError(RetryableStepError):
    """The batch did not end within the allowed wait."""


class BatchRunner:
    def __init__(
        self,
        client: ClaudeBatchClient,
        poll_schedule: Sequence[float] = (30.0, 60.0, 120.0, 300.0),
        max_wait_seconds: float = 24 * 60 * 60,
    ):
        self.client = client
        self._poll_schedule = tuple(poll_schedule) or (60.0,)
        self._max_wait = max_wait_seconds

    def model_for(self, request: BatchRequest) -> str:
        return request.model or self.client.default_model

    async def submit(self, requests: list[BatchRequest]) -> str:
        created = await self.client.submit(requests)
        return created.batch_id

    async def wait(self, batch_id: str, sleep: Sleep) -> BatchStatus:
        waited = 0.0
        polls = 0
        while True:
            status = await self.client.get_status(batch_id)
            if status.is_ended:
                logger.info(
                    f"Batch {batch_id} ended: {status.request_counts.succeeded} succeeded, "
                    f"{status.request_counts.errored} errored"
                )
                return status

            delay = self._poll_schedule[min(polls, len(self._poll_schedule) - 1)]
            if waited + delay > self._max_wait:
                raise BatchTimeoutError(
                    f"Batch {batch_id} still {status.processing_status} after {waited:.0f}s"
                )
            polls += 1
            waited += delay
            await sleep(delay)

    async def collect(
        self, batch_id: str, correlation_index: dict[str, str], sleep: Sleep
    ) -> dict[str, BatchResultItem]:
        """Wait for the batch, then return results keyed by domain id."""
        await self.wait(batch_id, sleep)
        results = await self.client.get_results(batch_id)
        return self.client.map_results_to_articles(results, correlation_index)

    async def run(
        self,
        requests: list[BatchRequest],
        correlation_index: dict[str, str],
        sleep: Sleep,
    ) -> dict[str, BatchResultItem]:
        batch_id = await self.submit(requests)
        return await self.collect(batch_id, correlation_index, sleep)
