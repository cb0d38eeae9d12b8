"""集計・首位集合 ドメインサービス."""

from ballotbox.domain.entities.candidate import Candidate
from ballotbox.domain.entities.election import Election
from ballotbox.domain.repositories.candidate_repository import CandidateRepository
from ballotbox.domain.repositories.election_repository import ElectionRepository
from ballotbox.domain.services.candidate_registry import CandidateRegistry
from ballotbox.domain.services.voter_registry import VoterRegistry
from ballotbox.domain.value_objects.election_event import ElectionEvent


class TallyService:
    """票を候補者に加算し、首位集合を差分更新するドメインサービス.

    候補者の得票数を変更するのはこのサービスだけであり、得票数は
    1回の呼び出しで必ず1だけ増える。首位集合の差分更新はこの前提に
    依存しているため、減算や2票以上の加算を行ってはならない。
    """

    def __init__(
        self,
        candidate_registry: CandidateRegistry,
        voter_registry: VoterRegistry,
        candidate_repository: CandidateRepository,
        election_repository: ElectionRepository,
    ) -> None:
        self.candidate_registry = candidate_registry
        self.voter_registry = voter_registry
        self.candidate_repository = candidate_repository
        self.election_repository = election_repository

    async def load_election(self) -> Election:
        """現在の選挙状態を取得する. 未保存なら初期状態を返す."""
        election = await self.election_repository.get_current()
        if election is None:
            return Election()
        return election

    async def apply_vote(self, election: Election, candidate_id: int) -> Candidate:
        """候補者に1票を加算し、首位集合を更新する.

        選挙状態の保存は呼び出し側で行う。

        Args:
            election: 首位集合を保持する選挙状態
            candidate_id: 加算先の候補者ID

        Returns:
            加算後の候補者エンティティ

        Raises:
            InvalidCandidateId: 候補者IDが無効な場合
        """
        candidate = await self.candidate_registry.get_candidate(candidate_id)
        new_count = candidate.add_vote()
        election.record_candidate_count(candidate_id, new_count)
        return await self.candidate_repository.update(candidate)

    async def credit_vote(self, candidate_id: int) -> Candidate:
        """選挙状態を読み込み、候補者に1票を加算して保存する.

        Raises:
            InvalidCandidateId: 候補者IDが無効な場合
        """
        election = await self.load_election()
        candidate = await self.apply_vote(election, candidate_id)
        await self.election_repository.save(election)
        return candidate

    async def validate_candidate_id(self, candidate_id: int | None) -> None:
        await self.candidate_registry.validate_candidate_id(candidate_id)

    async def vote(self, voter_id: str, candidate_id: int) -> ElectionEvent:
        """直接投票を行う.

        検証（未登録・投票済み・候補者ID）をすべて終えてから状態を
        変更するため、失敗時に途中までの変更は残らない。

        Raises:
            NotRegistered: 有権者が未登録の場合
            AlreadyVoted: 有権者が投票済みの場合
            InvalidCandidateId: 候補者IDが無効な場合
        """
        voter = await self.voter_registry.get_eligible_voter(voter_id)
        await self.candidate_registry.validate_candidate_id(candidate_id)

        election = await self.load_election()
        voter.cast_direct_vote(candidate_id)
        await self.apply_vote(election, candidate_id)
        election.record_direct_vote()

        await self.voter_registry.save(voter)
        await self.election_repository.save(election)
        return ElectionEvent.vote_cast(voter_id, candidate_id)

    async def get_total_votes(self) -> int:
        election = await self.load_election()
        return election.total_votes

    async def get_winners(self) -> list[Candidate]:
        """首位集合の候補者を、首位に並んだ順で返す."""
        election = await self.load_election()
        return [
            await self.candidate_registry.get_candidate(candidate_id)
            for candidate_id in election.leading_candidate_ids
        ]
