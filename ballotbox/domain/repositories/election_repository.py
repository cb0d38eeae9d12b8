"""Election repository interface."""

from abc import abstractmethod

from ballotbox.domain.entities.election import Election
from ballotbox.domain.repositories.base import BaseRepository


class ElectionRepository(BaseRepository[Election]):
    """Repository interface for the single election state record."""

    @abstractmethod
    async def get_current(self) -> Election | None:
        """現在の選挙状態を取得.

        Returns:
            選挙エンティティ、まだ保存されていない場合はNone
        """
        pass

    @abstractmethod
    async def save(self, election: Election) -> Election:
        """選挙状態を作成または更新."""
        pass
