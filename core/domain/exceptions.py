"""Domain-level exceptions shared by the application and orchestration layers."""


class RecordStoreIntegrityError(Exception):
    """A uniqueness or reference constraint of the record store was violated."""


class RecordNotFoundError(LookupError):
    """A referenced record does not exist."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class NonRetriableError(Exception):
    """A step failure that retrying cannot fix."""


class RetryableStepError(Exception):
    """A step failure expected to clear on a later attempt."""
