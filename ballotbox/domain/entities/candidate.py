"""Candidate entity."""

from ballotbox.domain.entities.base import BaseEntity


class Candidate(BaseEntity):
    """選挙の候補者を表すエンティティ.

    候補者IDは登録順に1から連番で採番される。0は「投票なし」を表す
    番兵値として予約されており、有効な候補者IDにはならない。
    """

    def __init__(
        self,
        name: str,
        vote_count: int = 0,
        id: int | None = None,
    ) -> None:
        """候補者エンティティを初期化する.

        Args:
            name: 候補者名（完全一致で一意）
            vote_count: 得票数
            id: 候補者ID
        """
        super().__init__(id)
        self.name = name
        self.vote_count = vote_count

    def __str__(self) -> str:
        """文字列表現を返す."""
        return f"{self.name} (#{self.id}, {self.vote_count} votes)"

    def __repr__(self) -> str:
        return (
            f"Candidate(id={self.id}, name={self.name!r}, "
            f"vote_count={self.vote_count})"
        )

    def add_vote(self) -> int:
        """得票数を1増やし、増加後の得票数を返す."""
        self.vote_count += 1
        return self.vote_count
