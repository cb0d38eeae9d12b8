"""有権者レジストリ ドメインサービス."""

from ballotbox.domain.entities.voter import Voter
from ballotbox.domain.exceptions import AlreadyRegistered, AlreadyVoted, NotRegistered
from ballotbox.domain.repositories.voter_repository import VoterRepository


class VoterRegistry:
    """有権者の登録状態を管理するドメインサービス.

    有権者は登録後にその場で更新されるのみで、削除されることはない。
    """

    def __init__(self, voter_repository: VoterRepository) -> None:
        self.voter_repository = voter_repository

    async def get_voter(self, voter_id: str) -> Voter:
        """有権者を取得する. 未登録の場合は未登録状態の値を返す."""
        voter = await self.voter_repository.get_by_voter_id(voter_id)
        if voter is None:
            return Voter.unregistered(voter_id)
        return voter

    async def register_voter(self, voter_id: str) -> Voter:
        """有権者を登録する.

        Raises:
            AlreadyRegistered: 既に登録済みの場合
        """
        voter = await self.get_voter(voter_id)
        if voter.is_registered:
            raise AlreadyRegistered(voter_id)
        voter.register()
        return await self.voter_repository.save(voter)

    async def get_eligible_voter(self, voter_id: str) -> Voter:
        """投票または委任が可能な有権者を取得する.

        Raises:
            NotRegistered: 未登録の場合
            AlreadyVoted: 投票済み（委任済みを含む）の場合
        """
        voter = await self.get_voter(voter_id)
        if not voter.is_registered:
            raise NotRegistered(voter_id)
        if voter.has_voted:
            raise AlreadyVoted(voter_id)
        return voter

    async def save(self, voter: Voter) -> Voter:
        return await self.voter_repository.save(voter)
