"""候補者レジストリ ドメインサービス."""

from ballotbox.domain.entities.candidate import Candidate
from ballotbox.domain.exceptions import DuplicateCandidate, InvalidCandidateId
from ballotbox.domain.repositories.candidate_repository import CandidateRepository


class CandidateRegistry:
    """候補者の登録と参照を行うドメインサービス.

    候補者は追加のみで、削除・改名はできない。候補者IDは
    ``1..候補者数`` の連番になるよう、このサービスが採番する。
    """

    def __init__(self, candidate_repository: CandidateRepository) -> None:
        self.candidate_repository = candidate_repository

    async def add_candidate(self, name: str) -> Candidate:
        """候補者を登録する.

        Args:
            name: 候補者名（大文字小文字を区別した完全一致で一意）

        Returns:
            採番済みの候補者エンティティ

        Raises:
            DuplicateCandidate: 同名の候補者が既に存在する場合
        """
        if await self.candidate_repository.get_by_name(name) is not None:
            raise DuplicateCandidate(name)

        next_id = await self.candidate_repository.count() + 1
        return await self.candidate_repository.create(
            Candidate(name=name, vote_count=0, id=next_id)
        )

    async def get_candidate(self, candidate_id: int) -> Candidate:
        """候補者IDで候補者を取得する.

        Raises:
            InvalidCandidateId: IDが0以下、または候補者数を超える場合
        """
        await self.validate_candidate_id(candidate_id)
        candidate = await self.candidate_repository.get_by_id(candidate_id)
        if candidate is None:
            raise InvalidCandidateId(candidate_id)
        return candidate

    async def validate_candidate_id(self, candidate_id: int | None) -> None:
        if candidate_id is None or candidate_id < 1:
            raise InvalidCandidateId(candidate_id)
        if candidate_id > await self.candidate_repository.count():
            raise InvalidCandidateId(candidate_id)

    async def list_candidates(self) -> list[Candidate]:
        """全候補者を登録順に返す."""
        return await self.candidate_repository.get_all()
