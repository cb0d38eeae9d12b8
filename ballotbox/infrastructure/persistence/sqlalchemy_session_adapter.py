"""SQLAlchemy AsyncSession adapter for ISessionAdapter."""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.engine.result import Result
from sqlalchemy.ext.asyncio import AsyncSession

from ballotbox.domain.repositories.session_adapter import ISessionAdapter


# Key for pg_advisory_xact_lock; any constant shared by all writers works.
ELECTION_WRITE_LOCK_KEY = 0x62616C6C6F74


class SQLAlchemySessionAdapter(ISessionAdapter):
    """Wrap one AsyncSession shared by the election repositories.

    Every repository call made during an operation goes through the same
    session, so the operation commits or rolls back as one transaction.

    Write locking depends on the backend:
        PostgreSQL: a transaction-scoped advisory lock.
        SQLite: nothing to do here; ``AsyncDatabase`` opens every
        transaction with ``BEGIN IMMEDIATE``.
    """

    def __init__(self, async_session: AsyncSession):
        """Initialize with an async session.

        Args:
            async_session: Session owned by ``AsyncDatabase.get_session``
        """
        self._session = async_session

    @property
    def dialect_name(self) -> str:
        return self._session.get_bind().dialect.name

    async def lock_for_write(self) -> None:
        if self.dialect_name == "postgresql":
            await self._session.execute(
                select(func.pg_advisory_xact_lock(ELECTION_WRITE_LOCK_KEY))
            )

    async def execute(
        self, statement: Any, params: dict[str, Any] | None = None
    ) -> Result[Any]:
        if params:
            return await self._session.execute(statement, params)
        return await self._session.execute(statement)

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()

    def add(self, instance: Any) -> None:
        self._session.add(instance)

    async def flush(self) -> None:
        await self._session.flush()

    async def refresh(self, instance: Any) -> None:
        await self._session.refresh(instance)

    async def get(self, entity_type: Any, entity_id: Any) -> Any | None:
        return await self._session.get(entity_type, entity_id)
