"""Base repository implementation for infrastructure layer."""

import logging

from typing import Any, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from ballotbox.domain.entities.base import BaseEntity
from ballotbox.domain.repositories.base import BaseRepository
from ballotbox.domain.repositories.session_adapter import ISessionAdapter
from ballotbox.infrastructure.exceptions import DatabaseError


logger = logging.getLogger(__name__)


T = TypeVar("T", bound=BaseEntity)


class BaseRepositoryImpl(BaseRepository[T]):
    """Base repository implementation using ISessionAdapter.

    This class provides generic CRUD operations on top of the
    ISessionAdapter interface (or a raw AsyncSession). Transaction
    boundaries are owned by the caller: repositories only flush, the use
    case commits or rolls back.

    Type Parameters:
        T: Domain entity type that extends BaseEntity

    Attributes:
        session: Database session (AsyncSession or ISessionAdapter)
        entity_class: Domain entity class for type conversions
        model_class: SQLAlchemy ORM model class

    Note:
        Subclasses must implement the conversion methods:
        _to_entity(), _to_model(), and _update_model()
    """

    def __init__(
        self,
        session: AsyncSession | ISessionAdapter,
        entity_class: type[T],
        model_class: type[Any],
    ):
        self.session = session
        self.entity_class = entity_class
        self.model_class = model_class

    def _database_error(
        self, action: str, error: Exception, **details: Any
    ) -> DatabaseError:
        logger.error(
            f"Database error in {self.__class__.__name__}.{action}: {error}"
        )
        return DatabaseError(
            f"Failed to {action} {self.model_class.__tablename__}",
            {**details, "error": str(error)},
        )

    async def get_by_id(self, entity_id: int) -> T | None:
        """Get entity by ID."""
        try:
            result = await self.session.get(self.model_class, entity_id)
        except SQLAlchemyError as e:
            raise self._database_error("get", e, id=entity_id) from e
        if result:
            return self._to_entity(result)
        return None

    async def get_all(
        self, limit: int | None = None, offset: int | None = None
    ) -> list[T]:
        """Get all entities ordered by ID with optional pagination."""
        query = select(self.model_class).order_by(self.model_class.id)
        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)

        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise self._database_error("list", e) from e
        models = result.scalars().all()
        return [self._to_entity(model) for model in models]

    async def create(self, entity: T) -> T:
        """Create a new entity."""
        model = self._to_model(entity)
        try:
            self.session.add(model)
            await self.session.flush()
            await self.session.refresh(model)
        except SQLAlchemyError as e:
            raise self._database_error("create", e, id=entity.id) from e
        return self._to_entity(model)

    async def update(self, entity: T) -> T:
        """Update an existing entity."""
        if not entity.id:
            raise ValueError("Entity must have an ID to update")

        try:
            model = await self.session.get(self.model_class, entity.id)
            if not model:
                raise ValueError(f"Entity with ID {entity.id} not found")

            self._update_model(model, entity)

            await self.session.flush()
            await self.session.refresh(model)
        except SQLAlchemyError as e:
            raise self._database_error("update", e, id=entity.id) from e
        return self._to_entity(model)

    async def count(self) -> int:
        """Count total number of entities."""
        query = select(func.count()).select_from(self.model_class)
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise self._database_error("count", e) from e
        count = result.scalar()
        return count if count is not None else 0

    def _to_entity(self, model: Any) -> T:
        """Convert database model to domain entity."""
        raise NotImplementedError("Subclass must implement _to_entity")

    def _to_model(self, entity: T) -> Any:
        """Convert domain entity to database model."""
        raise NotImplementedError("Subclass must implement _to_model")

    def _update_model(self, model: Any, entity: T) -> None:
        """Update model fields from entity."""
        raise NotImplementedError("Subclass must implement _update_model")
