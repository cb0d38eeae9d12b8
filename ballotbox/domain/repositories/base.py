"""Base repository interface."""

from typing import Generic, TypeVar
from abc import ABC, abstractmethod

from ballotbox.domain.entities.base import BaseEntity


T = TypeVar("T", bound=BaseEntity)


class BaseRepository(ABC, Generic[T]):
    """Generic repository interface for domain entities.

    Repositories hand out detached entities: mutating a returned entity has
    no effect until it is passed back through ``create`` or ``update``.
    """

    @abstractmethod
    async def get_by_id(self, entity_id: int) -> T | None:
        """Get entity by ID."""
        pass

    @abstractmethod
    async def get_all(
        self, limit: int | None = None, offset: int | None = None
    ) -> list[T]:
        """Get all entities with optional pagination."""
        pass

    @abstractmethod
    async def create(self, entity: T) -> T:
        """Create a new entity."""
        pass

    @abstractmethod
    async def update(self, entity: T) -> T:
        """Update an existing entity."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Count total number of entities."""
        pass
