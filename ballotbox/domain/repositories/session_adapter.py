"""Session adapter port.

The domain defines this interface so that use cases can control
transaction boundaries without depending on SQLAlchemy directly.
"""

from abc import ABC, abstractmethod
from typing import Any


class ISessionAdapter(ABC):
    """Transaction/session port used by repositories and use cases."""

    @abstractmethod
    async def execute(self, statement: Any, params: dict[str, Any] | None = None) -> Any:
        """Execute a statement."""
        pass

    @abstractmethod
    async def commit(self) -> None:
        """Commit the current transaction."""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Rollback the current transaction."""
        pass

    @abstractmethod
    async def lock_for_write(self) -> None:
        """Take the election-wide write lock for the current transaction.

        The lock is held until commit or rollback, so concurrent writers in
        other sessions or processes wait instead of interleaving.
        """
        pass

    @abstractmethod
    def add(self, instance: Any) -> None:
        """Add instance to session."""
        pass

    @abstractmethod
    async def flush(self) -> None:
        """Flush changes to database."""
        pass

    @abstractmethod
    async def refresh(self, instance: Any) -> None:
        """Refresh instance from database."""
        pass

    @abstractmethod
    async def get(self, entity_type: Any, entity_id: Any) -> Any | None:
        """Get entity by primary key."""
        pass
