"""候補者リポジトリのインターフェース."""

from abc import abstractmethod

from ballotbox.domain.entities.candidate import Candidate
from ballotbox.domain.repositories.base import BaseRepository


class CandidateRepository(BaseRepository[Candidate]):
    """候補者のリポジトリインターフェース.

    ``get_all`` は候補者ID（登録順）の昇順で返すこと。
    ``create`` は呼び出し側が採番したIDをそのまま保存すること。
    """

    @abstractmethod
    async def get_by_name(self, name: str) -> Candidate | None:
        """候補者名（完全一致）で候補者を取得.

        Args:
            name: 候補者名

        Returns:
            候補者エンティティ、見つからない場合はNone
        """
        pass
