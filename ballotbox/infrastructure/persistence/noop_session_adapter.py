"""No-op session adapter for the in-memory repositories."""

from typing import Any

from ballotbox.domain.repositories.session_adapter import ISessionAdapter


class NoOpSessionAdapter(ISessionAdapter):
    """No-op session adapter for use with the in-memory repositories.

    In-memory repositories apply each save immediately and hand out
    detached copies, so there is no transaction to commit or roll back.
    """

    async def execute(
        self, statement: Any, params: dict[str, Any] | None = None
    ) -> Any:
        """No-op: in-memory repositories do not run statements."""
        raise NotImplementedError(
            "NoOpSessionAdapter does not support execute. "
            "Use repository methods instead."
        )

    async def commit(self) -> None:
        """No-op: saves are applied immediately."""
        pass

    async def rollback(self) -> None:
        """No-op: nothing is saved before validation succeeds."""
        pass

    async def lock_for_write(self) -> None:
        """No-op: the use case lock already serializes the in-memory store."""
        pass

    def add(self, instance: Any) -> None:
        """No-op: use repository methods instead."""
        pass

    async def flush(self) -> None:
        """No-op: saves are applied immediately."""
        pass

    async def refresh(self, instance: Any) -> None:
        """No-op: repositories return fresh copies."""
        pass

    async def get(self, entity_type: Any, entity_id: Any) -> Any | None:
        """No-op: use repository.get_by_id instead."""
        raise NotImplementedError(
            "NoOpSessionAdapter does not support get. Use repository.get_by_id instead."
        )
