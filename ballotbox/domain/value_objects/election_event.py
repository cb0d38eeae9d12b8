"""選挙イベントの値オブジェクト.

監査ログや通知の連携先に渡すための観測値。集計の正しさには関与しない。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ElectionEventType(Enum):
    """選挙イベントの種別."""

    VOTER_REGISTERED = "voter_registered"
    CANDIDATE_ADDED = "candidate_added"
    VOTE_DELEGATED = "vote_delegated"
    VOTE_CAST = "vote_cast"
    WINNERS_SELECTED = "winners_selected"
    PERIOD_SET = "period_set"


@dataclass(frozen=True)
class ElectionEvent:
    """操作の結果として発生した選挙イベント."""

    event_type: ElectionEventType
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def voter_registered(cls, voter_id: str) -> "ElectionEvent":
        return cls(ElectionEventType.VOTER_REGISTERED, {"voter_id": voter_id})

    @classmethod
    def candidate_added(cls, candidate_id: int, name: str) -> "ElectionEvent":
        return cls(
            ElectionEventType.CANDIDATE_ADDED,
            {"candidate_id": candidate_id, "name": name},
        )

    @classmethod
    def vote_delegated(cls, from_voter_id: str, to_voter_id: str) -> "ElectionEvent":
        """委任が保留として記録されたことを表すイベント."""
        return cls(
            ElectionEventType.VOTE_DELEGATED,
            {"from_voter_id": from_voter_id, "to_voter_id": to_voter_id},
        )

    @classmethod
    def vote_cast(
        cls, voter_id: str, candidate_id: int, delegated: bool = False
    ) -> "ElectionEvent":
        """票が候補者に加算されたことを表すイベント.

        ``delegated`` がTrueの場合、委任先の投票済み候補者に委任元の票が
        即時加算されたことを表す。
        """
        return cls(
            ElectionEventType.VOTE_CAST,
            {"voter_id": voter_id, "candidate_id": candidate_id, "delegated": delegated},
        )

    @classmethod
    def winners_selected(cls, candidate_ids: list[int]) -> "ElectionEvent":
        return cls(
            ElectionEventType.WINNERS_SELECTED, {"candidate_ids": list(candidate_ids)}
        )

    @classmethod
    def period_set(cls, start_time: Any, end_time: Any) -> "ElectionEvent":
        return cls(
            ElectionEventType.PERIOD_SET,
            {"start_time": start_time, "end_time": end_time},
        )

    @property
    def name(self) -> str:
        return self.event_type.value
