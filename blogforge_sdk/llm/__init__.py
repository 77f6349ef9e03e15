"""Claude Message Batches access."""

from .batch_client import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    BatchCreateResult,
    BatchError,
    BatchMappingError,
    BatchNotEndedError,
    BatchRequest,
    BatchResultError,
    BatchResultItem,
    BatchStatus,
    ClaudeBatchClient,
    RequestCounts,
    SubmissionError,
    TokenUsage,
    make_custom_id,
)

__all__ = [
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_MODEL",
    "BatchCreateResult",
    "BatchError",
    "BatchMappingError",
    "BatchNotEndedError",
    "BatchRequest",
    "BatchResultError",
    "BatchResultItem",
    "BatchStatus",
    "ClaudeBatchClient",
    "RequestCounts",
    "SubmissionError",
    "TokenUsage",
    "make_custom_id",
]
