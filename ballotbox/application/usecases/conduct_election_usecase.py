"""選挙実施のユースケース.

有権者登録・候補者登録・委任・直接投票の4つの更新操作と参照操作を
提供する唯一の窓口。投票期間の判定と管理者判定はここでのみ行う。
"""

from typing import TypeVar
import asyncio

from collections.abc import Awaitable, Callable
from datetime import datetime

from ballotbox.application.dtos.election_dto import (
    AddCandidateInputDto,
    AddCandidateOutputDto,
    CandidateOutputItem,
    DelegateVoteInputDto,
    ElectionOperationOutputDto,
    GetCandidateOutputDto,
    GetVoterOutputDto,
    ListCandidatesOutputDto,
    RegisterVoterInputDto,
    SetPeriodInputDto,
    TotalVotesOutputDto,
    VoteInputDto,
    VoterOutputItem,
    WinnersOutputDto,
)
from ballotbox.common.logging import get_logger
from ballotbox.domain.exceptions import (
    ElectionError,
    InvalidPeriod,
    Unauthorized,
    VotingNotActive,
)
from ballotbox.domain.repositories.candidate_repository import CandidateRepository
from ballotbox.domain.repositories.election_repository import ElectionRepository
from ballotbox.domain.repositories.session_adapter import ISessionAdapter
from ballotbox.domain.repositories.voter_repository import VoterRepository
from ballotbox.domain.services.candidate_registry import CandidateRegistry
from ballotbox.domain.services.delegation_resolver import DelegationResolver
from ballotbox.domain.services.interfaces.admin_authority import IAdminAuthority
from ballotbox.domain.services.interfaces.period_gate import IPeriodGate
from ballotbox.domain.services.tally_service import TallyService
from ballotbox.domain.services.voter_registry import VoterRegistry
from ballotbox.domain.utils.time import as_utc, utc_now
from ballotbox.domain.value_objects.election_event import ElectionEvent
from ballotbox.infrastructure.exceptions import DatabaseError


logger = get_logger(__name__)

DATABASE_ERROR_CODE = "DatabaseError"


O = TypeVar("O", bound=ElectionOperationOutputDto)


class ConductElectionUseCase:
    """選挙実施のユースケース.

    首位集合の差分更新は並行な加算に対して安全ではないため、操作は2段階で
    直列化される。

    - 同一プロセス内: すべての操作（参照を含む）はコンストラクタで渡された
      ``asyncio.Lock`` の下で実行される。同じ選挙を扱うユースケースは
      同じロックを共有しなければならない（``Container`` が共有する）。
    - プロセス間: 更新操作は最初にセッションの書き込みロック
      （``ISessionAdapter.lock_for_write``）を取得し、コミットまたは
      ロールバックまで保持する。

    更新操作は成功時にコミット、失敗時にロールバックされ、途中までの変更が
    観測されることはない。
    """

    def __init__(
        self,
        candidate_repository: CandidateRepository,
        voter_repository: VoterRepository,
        election_repository: ElectionRepository,
        period_gate: IPeriodGate,
        admin_authority: IAdminAuthority,
        session_adapter: ISessionAdapter,
        clock: Callable[[], datetime] | None = None,
        lock: asyncio.Lock | None = None,
    ) -> None:
        """ユースケースを初期化する.

        Args:
            candidate_repository: 候補者リポジトリ
            voter_repository: 有権者リポジトリ
            election_repository: 選挙状態リポジトリ
            period_gate: 投票期間の判定
            admin_authority: 管理者の判定
            session_adapter: トランザクション制御用のセッションアダプター
            clock: 現在日時を返す関数（省略時はUTCの現在時刻）
            lock: 操作を直列化するロック（省略時はこのインスタンス専用）
        """
        self.candidate_registry = CandidateRegistry(candidate_repository)
        self.voter_registry = VoterRegistry(voter_repository)
        self.tally_service = TallyService(
            candidate_registry=self.candidate_registry,
            voter_registry=self.voter_registry,
            candidate_repository=candidate_repository,
            election_repository=election_repository,
        )
        self.delegation_resolver = DelegationResolver(
            voter_registry=self.voter_registry,
            tally_service=self.tally_service,
        )
        self.election_repository = election_repository
        self.period_gate = period_gate
        self.admin_authority = admin_authority
        self.session_adapter = session_adapter
        self._clock = clock or utc_now
        self._lock = lock or asyncio.Lock()

    # ------------------------------------------------------------------
    # 更新操作
    # ------------------------------------------------------------------

    async def set_period(
        self, input_dto: SetPeriodInputDto
    ) -> ElectionOperationOutputDto:
        """投票期間を設定する（管理者のみ）."""

        async def action() -> ElectionOperationOutputDto:
            self._require_admin(input_dto.caller_id)
            start_time = as_utc(input_dto.start_time)
            end_time = as_utc(input_dto.end_time)
            if start_time >= end_time:
                raise InvalidPeriod(start_time, end_time)

            election = await self.tally_service.load_election()
            election.set_period(start_time, end_time)
            await self.election_repository.save(election)
            return ElectionOperationOutputDto(
                success=True,
                events=[ElectionEvent.period_set(start_time, end_time)],
            )

        return await self._mutate("set_period", action, ElectionOperationOutputDto)

    async def register_voter(
        self, input_dto: RegisterVoterInputDto
    ) -> ElectionOperationOutputDto:
        """有権者を登録する（投票期間内のみ）."""

        async def action() -> ElectionOperationOutputDto:
            await self._require_open()
            await self.voter_registry.register_voter(input_dto.voter_id)
            return ElectionOperationOutputDto(
                success=True,
                events=[ElectionEvent.voter_registered(input_dto.voter_id)],
            )

        return await self._mutate(
            "register_voter", action, ElectionOperationOutputDto
        )

    async def add_candidate(
        self, input_dto: AddCandidateInputDto
    ) -> AddCandidateOutputDto:
        """候補者を登録する（管理者のみ）."""

        async def action() -> AddCandidateOutputDto:
            self._require_admin(input_dto.caller_id)
            candidate = await self.candidate_registry.add_candidate(input_dto.name)
            return AddCandidateOutputDto(
                success=True,
                candidate_id=candidate.id,
                events=[ElectionEvent.candidate_added(candidate.id or 0, candidate.name)],
            )

        return await self._mutate("add_candidate", action, AddCandidateOutputDto)

    async def delegate_vote(
        self, input_dto: DelegateVoteInputDto
    ) -> ElectionOperationOutputDto:
        """投票を委任する（投票期間内のみ）."""

        async def action() -> ElectionOperationOutputDto:
            await self._require_open()
            event = await self.delegation_resolver.delegate_vote(
                input_dto.from_voter_id, input_dto.to_voter_id
            )
            return ElectionOperationOutputDto(success=True, events=[event])

        return await self._mutate("delegate_vote", action, ElectionOperationOutputDto)

    async def vote(self, input_dto: VoteInputDto) -> ElectionOperationOutputDto:
        """直接投票する（投票期間内のみ）."""

        async def action() -> ElectionOperationOutputDto:
            await self._require_open()
            event = await self.tally_service.vote(
                input_dto.voter_id, input_dto.candidate_id
            )
            return ElectionOperationOutputDto(success=True, events=[event])

        return await self._mutate("vote", action, ElectionOperationOutputDto)

    async def announce_winners(self) -> WinnersOutputDto:
        """首位候補者を取得し、WINNERS_SELECTEDイベントを発行する."""

        async def action() -> WinnersOutputDto:
            winners = await self.tally_service.get_winners()
            return WinnersOutputDto(
                success=True,
                winners=[CandidateOutputItem.from_entity(c) for c in winners],
                events=[ElectionEvent.winners_selected([c.id or 0 for c in winners])],
            )

        return await self._query("announce_winners", action, WinnersOutputDto)

    # ------------------------------------------------------------------
    # 参照操作
    # ------------------------------------------------------------------

    async def get_candidate(self, candidate_id: int) -> GetCandidateOutputDto:
        """候補者を取得する."""

        async def action() -> GetCandidateOutputDto:
            candidate = await self.candidate_registry.get_candidate(candidate_id)
            return GetCandidateOutputDto(
                success=True, candidate=CandidateOutputItem.from_entity(candidate)
            )

        return await self._query("get_candidate", action, GetCandidateOutputDto)

    async def list_candidates(self) -> ListCandidatesOutputDto:
        """全候補者を登録順に取得する."""

        async def action() -> ListCandidatesOutputDto:
            candidates = await self.candidate_registry.list_candidates()
            return ListCandidatesOutputDto(
                success=True,
                candidates=[CandidateOutputItem.from_entity(c) for c in candidates],
            )

        return await self._query("list_candidates", action, ListCandidatesOutputDto)

    async def get_voter(self, voter_id: str) -> GetVoterOutputDto:
        """有権者を取得する（未登録の場合は未登録状態を返す）."""

        async def action() -> GetVoterOutputDto:
            voter = await self.voter_registry.get_voter(voter_id)
            return GetVoterOutputDto(
                success=True, voter=VoterOutputItem.from_entity(voter)
            )

        return await self._query("get_voter", action, GetVoterOutputDto)

    async def get_total_votes(self) -> TotalVotesOutputDto:
        """直接投票の総数を取得する（委任による得票は含まない）."""

        async def action() -> TotalVotesOutputDto:
            total = await self.tally_service.get_total_votes()
            return TotalVotesOutputDto(success=True, total_votes=total)

        return await self._query("get_total_votes", action, TotalVotesOutputDto)

    async def get_winners(self) -> WinnersOutputDto:
        """首位候補者を首位に並んだ順で取得する."""

        async def action() -> WinnersOutputDto:
            winners = await self.tally_service.get_winners()
            return WinnersOutputDto(
                success=True,
                winners=[CandidateOutputItem.from_entity(c) for c in winners],
            )

        return await self._query("get_winners", action, WinnersOutputDto)

    # ------------------------------------------------------------------
    # 内部処理
    # ------------------------------------------------------------------

    async def _require_open(self) -> None:
        now = self._clock()
        if not await self.period_gate.is_open(now):
            raise VotingNotActive(now)

    def _require_admin(self, caller_id: str) -> None:
        if not self.admin_authority.is_admin(caller_id):
            raise Unauthorized(caller_id)

    async def _mutate(
        self,
        operation: str,
        action: Callable[[], Awaitable[O]],
        output_class: type[O],
    ) -> O:
        """更新操作をロックの下で実行し、コミットまたはロールバックする."""
        async with self._lock:
            try:
                await self.session_adapter.lock_for_write()
                output = await action()
                await self.session_adapter.commit()
            except ElectionError as e:
                await self.session_adapter.rollback()
                logger.warning(
                    "Election operation rejected",
                    operation=operation,
                    error_code=e.code,
                    **e.details,
                )
                return output_class(
                    success=False, error_code=e.code, error_message=e.message
                )
            except DatabaseError as e:
                await self.session_adapter.rollback()
                logger.error(
                    "Election operation failed",
                    operation=operation,
                    reason=e.message,
                    **e.details,
                )
                return output_class(
                    success=False,
                    error_code=DATABASE_ERROR_CODE,
                    error_message=e.message,
                )
            except Exception:
                await self.session_adapter.rollback()
                raise

        self._log_events(operation, output.events)
        return output

    async def _query(
        self,
        operation: str,
        action: Callable[[], Awaitable[O]],
        output_class: type[O],
    ) -> O:
        """参照操作をロックの下で実行する.

        読み取りのトランザクションは終了時に閉じ、書き込みロックを保持しない。
        """
        async with self._lock:
            try:
                output = await action()
            except ElectionError as e:
                await self.session_adapter.rollback()
                logger.debug(
                    "Election query rejected", operation=operation, error_code=e.code
                )
                return output_class(
                    success=False, error_code=e.code, error_message=e.message
                )
            except DatabaseError as e:
                await self.session_adapter.rollback()
                logger.error(
                    "Election query failed", operation=operation, reason=e.message
                )
                return output_class(
                    success=False,
                    error_code=DATABASE_ERROR_CODE,
                    error_message=e.message,
                )
            await self.session_adapter.rollback()

        self._log_events(operation, output.events)
        return output

    def _log_events(self, operation: str, events: list[ElectionEvent]) -> None:
        for event in events:
            logger.info(event.name, operation=operation, **event.payload)
