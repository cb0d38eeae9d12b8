"""Election repository implementation using SQLAlchemy."""

from sqlalchemy.ext.asyncio import AsyncSession

from ballotbox.domain.entities.election import Election
from ballotbox.domain.repositories.election_repository import ElectionRepository
from ballotbox.domain.repositories.session_adapter import ISessionAdapter
from ballotbox.infrastructure.persistence.base_repository_impl import BaseRepositoryImpl
from ballotbox.infrastructure.persistence.sqlalchemy_models import ElectionModel


class ElectionRepositoryImpl(BaseRepositoryImpl[Election], ElectionRepository):
    """Election repository implementation using SQLAlchemy.

    The elections table holds a single row; the first row by id is the
    current election state.
    """

    def __init__(self, session: AsyncSession | ISessionAdapter):
        super().__init__(
            session=session,
            entity_class=Election,
            model_class=ElectionModel,
        )

    async def get_current(self) -> Election | None:
        """現在の選挙状態を取得."""
        elections = await self.get_all(limit=1)
        return elections[0] if elections else None

    async def save(self, election: Election) -> Election:
        """選挙状態を作成または更新."""
        if election.id is None:
            current = await self.get_current()
            if current is None:
                return await self.create(election)
            election.id = current.id
        return await self.update(election)

    def _to_entity(self, model: ElectionModel) -> Election:
        return Election(
            id=model.id,
            start_time=model.start_time,
            end_time=model.end_time,
            total_votes=model.total_votes,
            highest_vote_count=model.highest_vote_count,
            leading_candidate_ids=list(model.leading_candidate_ids or []),
        )

    def _to_model(self, entity: Election) -> ElectionModel:
        return ElectionModel(
            id=entity.id,
            start_time=entity.start_time,
            end_time=entity.end_time,
            total_votes=entity.total_votes,
            highest_vote_count=entity.highest_vote_count,
            leading_candidate_ids=list(entity.leading_candidate_ids),
        )

    def _update_model(self, model: ElectionModel, entity: Election) -> None:
        model.start_time = entity.start_time
        model.end_time = entity.end_time
        model.total_votes = entity.total_votes
        model.highest_vote_count = entity.highest_vote_count
        # JSON列は再代入しないと変更が検知されない
        model.leading_candidate_ids = list(entity.leading_candidate_ids)
