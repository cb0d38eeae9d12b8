"""Candidate repository implementation using SQLAlchemy."""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ballotbox.domain.entities.candidate import Candidate
from ballotbox.domain.repositories.candidate_repository import CandidateRepository
from ballotbox.domain.repositories.session_adapter import ISessionAdapter
from ballotbox.infrastructure.persistence.base_repository_impl import BaseRepositoryImpl
from ballotbox.infrastructure.persistence.sqlalchemy_models import CandidateModel


class CandidateRepositoryImpl(BaseRepositoryImpl[Candidate], CandidateRepository):
    """Candidate repository implementation using SQLAlchemy."""

    def __init__(self, session: AsyncSession | ISessionAdapter):
        """Initialize repository with database session.

        Args:
            session: AsyncSession for database operations
        """
        super().__init__(
            session=session,
            entity_class=Candidate,
            model_class=CandidateModel,
        )

    async def get_by_name(self, name: str) -> Candidate | None:
        """候補者名（完全一致）で候補者を取得.

        Args:
            name: 候補者名

        Returns:
            候補者エンティティ、見つからない場合はNone
        """
        query = select(CandidateModel).where(CandidateModel.name == name)
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise self._database_error("get by name", e, name=name) from e
        model = result.scalars().first()
        return self._to_entity(model) if model else None

    def _to_entity(self, model: CandidateModel) -> Candidate:
        return Candidate(
            id=model.id,
            name=model.name,
            vote_count=model.vote_count,
        )

    def _to_model(self, entity: Candidate) -> CandidateModel:
        return CandidateModel(
            id=entity.id,
            name=entity.name,
            vote_count=entity.vote_count,
        )

    def _update_model(self, model: CandidateModel, entity: Candidate) -> None:
        # 候補者名は登録後に変更しない
        model.vote_count = entity.vote_count
