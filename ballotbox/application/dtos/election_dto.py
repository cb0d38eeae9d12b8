"""選挙操作に関するDTO.

このモジュールは ConductElectionUseCase の入出力DTOを定義します。
出力DTOは成功時に値を、失敗時にエラーコードとメッセージを持ちます。
"""

from dataclasses import dataclass, field
from datetime import datetime

from ballotbox.domain.entities import Candidate, Voter
from ballotbox.domain.value_objects.election_event import ElectionEvent


# =============================================================================
# Input DTOs
# =============================================================================


@dataclass
class SetPeriodInputDto:
    """投票期間設定の入力DTO."""

    caller_id: str
    start_time: datetime
    end_time: datetime


@dataclass
class RegisterVoterInputDto:
    """有権者登録の入力DTO."""

    voter_id: str


@dataclass
class AddCandidateInputDto:
    """候補者登録の入力DTO."""

    caller_id: str
    name: str


@dataclass
class DelegateVoteInputDto:
    """投票委任の入力DTO."""

    from_voter_id: str
    to_voter_id: str


@dataclass
class VoteInputDto:
    """直接投票の入力DTO."""

    voter_id: str
    candidate_id: int


# =============================================================================
# Output items
# =============================================================================


@dataclass(frozen=True)
class CandidateOutputItem:
    """候補者のスナップショット."""

    id: int
    name: str
    vote_count: int

    @classmethod
    def from_entity(cls, entity: Candidate) -> "CandidateOutputItem":
        """エンティティから出力アイテムを生成する."""
        return cls(
            id=entity.id or 0,
            name=entity.name,
            vote_count=entity.vote_count,
        )


@dataclass(frozen=True)
class VoterOutputItem:
    """有権者のスナップショット."""

    voter_id: str
    is_registered: bool
    has_voted: bool
    voted_candidate_id: int | None
    delegate_of: str | None

    @classmethod
    def from_entity(cls, entity: Voter) -> "VoterOutputItem":
        """エンティティから出力アイテムを生成する."""
        return cls(
            voter_id=entity.voter_id,
            is_registered=entity.is_registered,
            has_voted=entity.has_voted,
            voted_candidate_id=entity.voted_candidate_id,
            delegate_of=entity.delegate_of,
        )


# =============================================================================
# Output DTOs
# =============================================================================


@dataclass
class ElectionOperationOutputDto:
    """選挙操作の共通出力DTO."""

    success: bool
    error_code: str | None = None
    error_message: str | None = None
    events: list[ElectionEvent] = field(default_factory=list)


@dataclass
class AddCandidateOutputDto(ElectionOperationOutputDto):
    """候補者登録の出力DTO."""

    candidate_id: int | None = None


@dataclass
class GetCandidateOutputDto(ElectionOperationOutputDto):
    """候補者取得の出力DTO."""

    candidate: CandidateOutputItem | None = None


@dataclass
class ListCandidatesOutputDto(ElectionOperationOutputDto):
    """候補者一覧の出力DTO."""

    candidates: list[CandidateOutputItem] = field(default_factory=list)


@dataclass
class GetVoterOutputDto(ElectionOperationOutputDto):
    """有権者取得の出力DTO."""

    voter: VoterOutputItem | None = None


@dataclass
class TotalVotesOutputDto(ElectionOperationOutputDto):
    """直接投票総数の出力DTO."""

    total_votes: int = 0


@dataclass
class WinnersOutputDto(ElectionOperationOutputDto):
    """首位候補者の出力DTO（首位に並んだ順）."""

    winners: list[CandidateOutputItem] = field(default_factory=list)
