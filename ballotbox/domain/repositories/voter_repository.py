"""有権者リポジトリのインターフェース."""

from abc import abstractmethod

from ballotbox.domain.entities.voter import Voter
from ballotbox.domain.repositories.base import BaseRepository


class VoterRepository(BaseRepository[Voter]):
    """有権者のリポジトリインターフェース（有権者IDをキーとする）."""

    @abstractmethod
    async def get_by_voter_id(self, voter_id: str) -> Voter | None:
        """有権者IDで有権者を取得.

        Args:
            voter_id: 有権者ID

        Returns:
            有権者エンティティ、一度も保存されていない場合はNone
        """
        pass

    @abstractmethod
    async def save(self, voter: Voter) -> Voter:
        """有権者IDをキーとして有権者を作成または更新.

        Args:
            voter: 保存する有権者エンティティ

        Returns:
            保存後の有権者エンティティ
        """
        pass
