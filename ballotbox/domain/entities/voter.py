"""Voter entity."""

from ballotbox.domain.entities.base import BaseEntity


class Voter(BaseEntity):
    """有権者の登録・投票・委任状態を表すエンティティ.

    有権者の存在は ``is_registered`` で表現する。一度も登録されていない
    IDを参照した場合は :meth:`unregistered` が返す未登録の値を使う。
    ``has_voted`` と ``is_registered`` は一度Trueになると戻らない。
    """

    def __init__(
        self,
        voter_id: str,
        is_registered: bool = False,
        has_voted: bool = False,
        voted_candidate_id: int | None = None,
        delegate_of: str | None = None,
        id: int | None = None,
    ) -> None:
        """有権者エンティティを初期化する.

        Args:
            voter_id: 有権者ID
            is_registered: 登録済みかどうか
            has_voted: 投票済み（直接投票または委任）かどうか
            voted_candidate_id: 直接投票した候補者ID（未投票・委任の場合はNone）
            delegate_of: 保留中の委任元の有権者ID
            id: 永続化用の内部ID
        """
        super().__init__(id)
        self.voter_id = voter_id
        self.is_registered = is_registered
        self.has_voted = has_voted
        self.voted_candidate_id = voted_candidate_id
        self.delegate_of = delegate_of

    @classmethod
    def unregistered(cls, voter_id: str) -> "Voter":
        """一度も登録されていない有権者の値を返す."""
        return cls(voter_id=voter_id)

    def __str__(self) -> str:
        """文字列表現を返す."""
        return f"Voter({self.voter_id})"

    def __repr__(self) -> str:
        return (
            f"Voter(voter_id={self.voter_id!r}, "
            f"is_registered={self.is_registered}, "
            f"has_voted={self.has_voted}, "
            f"voted_candidate_id={self.voted_candidate_id}, "
            f"delegate_of={self.delegate_of!r})"
        )

    def register(self) -> None:
        self.is_registered = True

    def cast_direct_vote(self, candidate_id: int) -> None:
        """直接投票を記録する."""
        self.has_voted = True
        self.voted_candidate_id = candidate_id

    def spend_ballot_by_delegation(self) -> None:
        """委任によって投票権を消費する.

        委任元の記録にはどの候補者が得票したかは残らない。
        """
        self.has_voted = True

    def receive_delegation(self, from_voter_id: str) -> None:
        """保留中の委任を受ける. 既存の委任元は上書きされる."""
        self.delegate_of = from_voter_id

    @property
    def has_pending_delegation(self) -> bool:
        return self.delegate_of is not None
