"""Voter repository implementation using SQLAlchemy."""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ballotbox.domain.entities.voter import Voter
from ballotbox.domain.repositories.session_adapter import ISessionAdapter
from ballotbox.domain.repositories.voter_repository import VoterRepository
from ballotbox.infrastructure.persistence.base_repository_impl import BaseRepositoryImpl
from ballotbox.infrastructure.persistence.sqlalchemy_models import VoterModel


class VoterRepositoryImpl(BaseRepositoryImpl[Voter], VoterRepository):
    """Voter repository implementation using SQLAlchemy."""

    def __init__(self, session: AsyncSession | ISessionAdapter):
        super().__init__(
            session=session,
            entity_class=Voter,
            model_class=VoterModel,
        )

    async def get_by_voter_id(self, voter_id: str) -> Voter | None:
        """有権者IDで有権者を取得."""
        model = await self._get_model_by_voter_id(voter_id)
        return self._to_entity(model) if model else None

    async def save(self, voter: Voter) -> Voter:
        """有権者IDをキーとして有権者を作成または更新."""
        model = await self._get_model_by_voter_id(voter.voter_id)
        if model is None:
            return await self.create(voter)
        voter.id = model.id
        return await self.update(voter)

    async def _get_model_by_voter_id(self, voter_id: str) -> VoterModel | None:
        query = select(VoterModel).where(VoterModel.voter_id == voter_id)
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise self._database_error("get by voter id", e, voter_id=voter_id) from e
        return result.scalars().first()

    def _to_entity(self, model: VoterModel) -> Voter:
        return Voter(
            id=model.id,
            voter_id=model.voter_id,
            is_registered=model.is_registered,
            has_voted=model.has_voted,
            voted_candidate_id=model.voted_candidate_id,
            delegate_of=model.delegate_of,
        )

    def _to_model(self, entity: Voter) -> VoterModel:
        return VoterModel(
            id=entity.id,
            voter_id=entity.voter_id,
            is_registered=entity.is_registered,
            has_voted=entity.has_voted,
            voted_candidate_id=entity.voted_candidate_id,
            delegate_of=entity.delegate_of,
        )

    def _update_model(self, model: VoterModel, entity: Voter) -> None:
        model.is_registered = entity.is_registered
        model.has_voted = entity.has_voted
        model.voted_candidate_id = entity.voted_candidate_id
        model.delegate_of = entity.delegate_of
