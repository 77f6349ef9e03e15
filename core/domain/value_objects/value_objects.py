"""Domain value objects - pure Python immutable types."""

from dataclasses import dataclass
from uuid import UUID, uuid4


def new_id() -> str:
    """Generate a record identifier."""
    return str(uuid4())


@dataclass(frozen=True)
class ExecutionID:
    """Unique identifier for one orchestrator run, used for log tracing."""

    value: UUID

    @classmethod
    def generate(cls) -> "ExecutionID":
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class FeaturedImage:
    """Image bytes to upload as a post's featured media."""

    data: bytes
    filename: str
    mime_type: str = "image/png"

    def __repr__(self) -> str:
        return f"FeaturedImage(filename={self.filename!r}, mime_type={self.mime_type!r}, size={len(self.data)})"
