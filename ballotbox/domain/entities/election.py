"""Election entity."""

from datetime import datetime

from ballotbox.domain.entities.base import BaseEntity
from ballotbox.domain.utils.time import as_utc


class Election(BaseEntity):
    """選挙全体の集計状態を表すエンティティ.

    投票期間、直接投票の総数、および最多得票の候補者集合（首位集合）を
    保持する。首位集合は得票のたびに差分更新され、全候補者の再走査は
    行わない。

    首位集合の不変条件:
        ``leading_candidate_ids`` に含まれる全候補者の得票数は
        ``highest_vote_count`` と等しく、その得票数を持つ候補者は
        ちょうど1回ずつ、その得票数に達した順に並ぶ。
    """

    def __init__(
        self,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        total_votes: int = 0,
        highest_vote_count: int = 0,
        leading_candidate_ids: list[int] | None = None,
        id: int | None = None,
    ) -> None:
        """選挙エンティティを初期化する.

        Args:
            start_time: 投票期間の開始日時
            end_time: 投票期間の終了日時
            total_votes: 直接投票の総数（委任による得票は含まない）
            highest_vote_count: これまでの最多得票数
            leading_candidate_ids: 首位集合の候補者ID（首位に並んだ順）
            id: 選挙ID
        """
        super().__init__(id)
        self.start_time = as_utc(start_time) if start_time else None
        self.end_time = as_utc(end_time) if end_time else None
        self.total_votes = total_votes
        self.highest_vote_count = highest_vote_count
        self.leading_candidate_ids = list(leading_candidate_ids or [])

    def __str__(self) -> str:
        """文字列表現を返す."""
        return (
            f"Election(total_votes={self.total_votes}, "
            f"leaders={self.leading_candidate_ids})"
        )

    @property
    def has_period(self) -> bool:
        return self.start_time is not None and self.end_time is not None

    def set_period(self, start_time: datetime, end_time: datetime) -> None:
        """投票期間を設定する. 妥当性の検証は呼び出し側で行う."""
        self.start_time = as_utc(start_time)
        self.end_time = as_utc(end_time)

    def is_within_period(self, now: datetime) -> bool:
        """指定日時が投票期間内（両端を含む）かどうかを判定する."""
        if not self.has_period:
            return False
        return self.start_time <= as_utc(now) <= self.end_time  # type: ignore[operator]

    def record_candidate_count(self, candidate_id: int, new_count: int) -> None:
        """候補者の得票数が1増えたことを首位集合に反映する.

        得票数は1票ずつ単調増加し、このメソッドがその唯一の観測点である
        ことを前提とする。同じ候補者が同じ得票数で2回渡されることはない
        ため、追加時の重複チェックは不要。

        Args:
            candidate_id: 得票した候補者ID
            new_count: 増加後の得票数
        """
        if new_count > self.highest_vote_count:
            self.highest_vote_count = new_count
            self.leading_candidate_ids = [candidate_id]
        elif new_count == self.highest_vote_count:
            self.leading_candidate_ids.append(candidate_id)

    def record_direct_vote(self) -> None:
        self.total_votes += 1
