"""
Claude Message Batches client.

Submits generation requests as one provider batch, reports batch status
and fetches per-request results once the batch has ended. Polling is the
caller's job; the client keeps no state between calls and is safe to
share.

Usage:
    client = ClaudeBatchClient(api_key="...")
    batch = await client.submit([BatchRequest(custom_id="article-1", messages=[...])])
    status = await client.get_status(batch.batch_id)
    if status.is_ended:
        results = await client.get_results(batch.batch_id)
        by_article = client.map_results_to_articles(results, {"article-1": article_id})
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

import anthropic
from anthropic import AsyncAnthropic

from blogforge_sdk.logging import get_logger

logger = get_logger("blogforge_sdk.llm.batch")

DEFAULT_MODEL = "claude-haiku-4-5"
DEFAULT_MAX_TOKENS = 4096
MAX_REQUESTS_PER_BATCH = 100_000
CUSTOM_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{1,64}$")

ResultType = Literal["succeeded", "errored", "canceled", "expired"]
ProcessingStatus = Literal["in_progress", "canceling", "ended"]


class BatchError(Exception):
    """Base class for batch client errors."""


class SubmissionError(BatchError):
    """The batch was malformed or rejected by the provider."""


class BatchNotEndedError(BatchError):
    """Results were requested before the batch reached `ended`."""


class BatchMappingError(BatchError):
    """Returned correlation keys do not match the submitted ones."""

    def __init__(self, message: str, missing: set[str], unexpected: set[str]):
        self.missing = missing
        self.unexpected = unexpected
        super().__init__(message)


@dataclass
class BatchRequest:
    custom_id: str
    messages: list[dict[str, str]]
    system: str | None = None
    model: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None


@dataclass(frozen=True)
class RequestCounts:
    processing: int = 0
    succeeded: int = 0
    errored: int = 0
    canceled: int = 0
    expired: int = 0


@dataclass(frozen=True)
class BatchCreateResult:
    batch_id: str
    status: ProcessingStatus
    request_counts: RequestCounts
    created_at: datetime | None
    expires_at: datetime | None


@dataclass(frozen=True)
class BatchStatus:
    batch_id: str
    processing_status: ProcessingStatus
    request_counts: RequestCounts
    results_url: str | None
    created_at: datetime | None
    ended_at: datetime | None

    @property
    def is_ended(self) -> bool:
        return self.processing_status == "ended"


@dataclass(frozen=True)
class TokenUsage:
    input_tokens: int
    output_tokens: int


@dataclass(frozen=True)
class BatchResultError:
    type: str
    message: str


@dataclass(frozen=True)
class BatchResultItem:
    custom_id: str
    type: ResultType
    content: str | None = None
    usage: TokenUsage | None = None
    error: BatchResultError | None = None

    @property
    def succeeded(self) -> bool:
        return self.type == "succeeded" and self.content is not None


def make_custom_id(prefix: str, entity_id: str) -> str:
    """Build a provider-safe correlation key from a domain identifier."""
    raw = f"{prefix}-{entity_id}"
    return re.sub(r"[^a-zA-Z0-9_-]", "-", raw)[:64]


def _counts(batch: Any) -> RequestCounts:
    counts = batch.request_counts
    return RequestCounts(
        processing=counts.processing,
        succeeded=counts.succeeded,
        errored=counts.errored,
        canceled=counts.canceled,
        expired=counts.expired,
    )


def _to_status(batch: Any) -> BatchStatus:
    return BatchStatus(
        batch_id=batch.id,
        processing_status=batch.processing_status,
        request_counts=_counts(batch),
        results_url=getattr(batch, "results_url", None),
        created_at=getattr(batch, "created_at", None),
        ended_at=getattr(batch, "ended_at", None),
    )


def _to_result_item(entry: Any) -> BatchResultItem:
    result = entry.result
    if result.type == "succeeded":
        message = result.message
        text = next(
            (block.text for block in message.content if getattr(block, "type", None) == "text"),
            None,
        )
        return BatchResultItem(
            custom_id=entry.custom_id,
            type="succeeded",
            content=text,
            usage=TokenUsage(
                input_tokens=message.usage.input_tokens,
                output_tokens=message.usage.output_tokens,
            ),
        )
    if result.type == "errored":
        # result.error is an ErrorResponse wrapping the actual error object
        detail = getattr(result.error, "error", result.error)
        return BatchResultItem(
            custom_id=entry.custom_id,
            type="errored",
            error=BatchResultError(
                type=str(getattr(detail, "type", "unknown_error")),
                message=str(getattr(detail, "message", "") or "Unknown error"),
            ),
        )
    return BatchResultItem(custom_id=entry.custom_id, type=result.type)


class ClaudeBatchClient:
    """Thin async wrapper around ``client.messages.batches``."""

    def __init__(
        self,
        api_key: str | None = None,
        default_model: str = DEFAULT_MODEL,
        default_max_tokens: int = DEFAULT_MAX_TOKENS,
        client: AsyncAnthropic | None = None,
    ) -> None:
        if client is None:
            if not api_key:
                raise ValueError("ANTHROPIC_API_KEY is required for the Claude batch client")
            client = AsyncAnthropic(api_key=api_key)
        self._client = client
        self.default_model = default_model
        self.default_max_tokens = default_max_tokens

    def _validate(self, requests: list[BatchRequest]) -> None:
        if not requests:
            raise SubmissionError("At least one request is required")
        if len(requests) > MAX_REQUESTS_PER_BATCH:
            raise SubmissionError(f"Maximum {MAX_REQUESTS_PER_BATCH:,} requests per batch")

        seen: set[str] = set()
        for request in requests:
            if not CUSTOM_ID_PATTERN.match(request.custom_id):
                raise SubmissionError(f"Invalid correlation key: {request.custom_id!r}")
            if request.custom_id in seen:
                raise SubmissionError(f"Duplicate correlation key: {request.custom_id!r}")
            seen.add(request.custom_id)
            if not request.messages:
                raise SubmissionError(f"Request {request.custom_id} has no messages")

    def _to_params(self, request: BatchRequest) -> dict[str, Any]:
        params: dict[str, Any] = {
            "model": request.model or self.default_model,
            "max_tokens": request.max_tokens or self.default_max_tokens,
            "messages": request.messages,
        }
        if request.system is not None:
            params["system"] = request.system
        if request.temperature is not None:
            params["temperature"] = request.temperature
        return params

    async def submit(self, requests: list[BatchRequest]) -> BatchCreateResult:
        """Send all requests as one batch.

        Raises:
            SubmissionError: empty, oversized or malformed batch, or the
                provider rejected it
        """
        self._validate(requests)
        payload = [
            {"custom_id": request.custom_id, "params": self._to_params(request)}
            for request in requests
        ]
        try:
            batch = await self._client.messages.batches.create(requests=payload)
        except anthropic.APIStatusError as exc:
            raise SubmissionError(
                f"Batch rejected by provider (HTTP {exc.status_code}): {exc.message}"
            ) from exc

        logger.info(f"Submitted batch {batch.id} with {len(requests)} request(s)")
        return BatchCreateResult(
            batch_id=batch.id,
            status=batch.processing_status,
            request_counts=_counts(batch),
            created_at=getattr(batch, "created_at", None),
            expires_at=getattr(batch, "expires_at", None),
        )

    async def get_status(self, batch_id: str) -> BatchStatus:
        batch = await self._client.messages.batches.retrieve(batch_id)
        return _to_status(batch)

    async def get_results(self, batch_id: str) -> list[BatchResultItem]:
        """Fetch every per-request result of an ended batch."""
        status = await self.get_status(batch_id)
        if not status.is_ended:
            raise BatchNotEndedError(
                f"Batch {batch_id} is {status.processing_status}; results are not available yet"
            )

        items: list[BatchResultItem] = []
        async for entry in await self._client.messages.batches.results(batch_id):
            items.append(_to_result_item(entry))
        logger.info(f"Fetched {len(items)} result(s) for batch {batch_id}")
        return items

    async def cancel(self, batch_id: str) -> BatchStatus:
        batch = await self._client.messages.batches.cancel(batch_id)
        logger.info(f"Cancel requested for batch {batch_id}")
        return _to_status(batch)

    async def list_batches(self, limit: int = 20) -> list[BatchStatus]:
        batches: list[BatchStatus] = []
        async for batch in self._client.messages.batches.list(limit=limit):
            batches.append(_to_status(batch))
            if len(batches) >= limit:
                break
        return batches

    @staticmethod
    def map_results_to_articles(
        results: list[BatchResultItem], correlation_index: dict[str, str]
    ) -> dict[str, BatchResultItem]:
        """Join results to domain ids by correlation key.

        Args:
            results: Items returned by get_results
            correlation_index: correlation key -> domain id, one entry per
                submitted request

        Raises:
            BatchMappingError: a submitted key has no result, a result has a
                key that was never submitted, or a key appears twice
        """
        returned: dict[str, BatchResultItem] = {}
        duplicates: set[str] = set()
        for item in results:
            if item.custom_id in returned:
                duplicates.add(item.custom_id)
            returned[item.custom_id] = item

        submitted = set(correlation_index)
        missing = submitted - set(returned)
        unexpected = set(returned) - submitted
        if missing or unexpected or duplicates:
            raise BatchMappingError(
                f"Batch results do not match submitted requests: "
                f"missing={sorted(missing)}, unexpected={sorted(unexpected)}, "
                f"duplicated={sorted(duplicates)}",
                missing=missing,
                unexpected=unexpected | duplicates,
            )
        return {correlation_index[key]: item for key, item in returned.items()}
