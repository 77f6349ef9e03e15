"""Generic repository interface."""

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

E = TypeVar("E")


class Repository(ABC, Generic[E]):
    """Create/find/update by identifier.

    Implementations raise RecordStoreIntegrityError on uniqueness or
    reference violations and RecordNotFoundError when updating a
    missing record.
    """

    @abstractmethod
    async def add(self, entity: E) -> E:
        pass

    @abstractmethod
    async def get(self, entity_id: str) -> Optional[E]:
        pass

    @abstractmethod
    async def update(self, entity: E) -> E:
        pass
