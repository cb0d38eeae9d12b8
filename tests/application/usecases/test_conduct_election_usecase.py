"""Tests for ConductElectionUseCase."""

import asyncio
import random

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from ballotbox.application.dtos.election_dto import (
    AddCandidateInputDto,
    DelegateVoteInputDto,
    RegisterVoterInputDto,
    SetPeriodInputDto,
    VoteInputDto,
)
from ballotbox.application.usecases.conduct_election_usecase import (
    ConductElectionUseCase,
)
from ballotbox.domain.repositories.session_adapter import ISessionAdapter
from ballotbox.domain.value_objects.election_event import ElectionEventType
from ballotbox.infrastructure.di.container import create_in_memory_usecase
from ballotbox.infrastructure.exceptions import DatabaseError
from ballotbox.infrastructure.external.election_period_gate import (
    AlwaysOpenPeriodGate,
)
from ballotbox.infrastructure.external.static_admin_authority import (
    StaticAdminAuthority,
)
from ballotbox.infrastructure.persistence.in_memory_repository_impl import (
    InMemoryCandidateRepositoryImpl,
    InMemoryElectionRepositoryImpl,
    InMemoryVoterRepositoryImpl,
)
from ballotbox.infrastructure.persistence.noop_session_adapter import (
    NoOpSessionAdapter,
)


NOW = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)
ADMIN = "admin"


class FakeClock:
    """テスト用の進められる時計."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FakeClock(NOW)


@pytest.fixture
def usecase(clock):
    return create_in_memory_usecase(admin_ids=[ADMIN], clock=clock)


@pytest_asyncio.fixture
async def open_usecase(usecase):
    """投票期間を現在時刻の前後1時間に設定したユースケース."""
    output = await usecase.set_period(
        SetPeriodInputDto(
            caller_id=ADMIN,
            start_time=NOW - timedelta(hours=1),
            end_time=NOW + timedelta(hours=1),
        )
    )
    assert output.success
    return usecase


async def add_candidates(usecase, *names: str) -> None:
    for name in names:
        output = await usecase.add_candidate(
            AddCandidateInputDto(caller_id=ADMIN, name=name)
        )
        assert output.success


async def register(usecase, *voter_ids: str) -> None:
    for voter_id in voter_ids:
        output = await usecase.register_voter(RegisterVoterInputDto(voter_id=voter_id))
        assert output.success


async def vote(usecase, voter_id: str, candidate_id: int):
    return await usecase.vote(VoteInputDto(voter_id=voter_id, candidate_id=candidate_id))


async def delegate(usecase, from_voter_id: str, to_voter_id: str):
    return await usecase.delegate_vote(
        DelegateVoteInputDto(from_voter_id=from_voter_id, to_voter_id=to_voter_id)
    )


class TestSetPeriod:
    """投票期間設定のテスト."""

    @pytest.mark.asyncio
    async def test_admin_sets_period(self, usecase):
        output = await usecase.set_period(
            SetPeriodInputDto(
                caller_id=ADMIN,
                start_time=NOW,
                end_time=NOW + timedelta(days=1),
            )
        )

        assert output.success is True
        assert output.events[0].event_type == ElectionEventType.PERIOD_SET

    @pytest.mark.asyncio
    async def test_non_admin_is_unauthorized(self, usecase):
        output = await usecase.set_period(
            SetPeriodInputDto(
                caller_id="mallory",
                start_time=NOW,
                end_time=NOW + timedelta(days=1),
            )
        )

        assert output.success is False
        assert output.error_code == "Unauthorized"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("offset", [timedelta(0), timedelta(hours=-1)])
    async def test_start_must_be_before_end(self, usecase, offset):
        """開始日時が終了日時以降の場合はInvalidPeriodになること."""
        output = await usecase.set_period(
            SetPeriodInputDto(caller_id=ADMIN, start_time=NOW, end_time=NOW + offset)
        )

        assert output.success is False
        assert output.error_code == "InvalidPeriod"


class TestPeriodGate:
    """投票期間による操作制限のテスト."""

    @pytest.mark.asyncio
    async def test_operations_rejected_before_period_is_set(self, usecase):
        """期間未設定では登録・投票・委任がVotingNotActiveになること."""
        outputs = [
            await usecase.register_voter(RegisterVoterInputDto(voter_id="alice")),
            await vote(usecase, "alice", 1),
            await delegate(usecase, "alice", "bob"),
        ]

        assert [o.error_code for o in outputs] == ["VotingNotActive"] * 3

    @pytest.mark.asyncio
    async def test_operations_rejected_after_period_ends(self, open_usecase, clock):
        await add_candidates(open_usecase, "Alice")
        await register(open_usecase, "v1")

        clock.now = NOW + timedelta(hours=2)
        output = await vote(open_usecase, "v1", 1)

        assert output.error_code == "VotingNotActive"
        voter = (await open_usecase.get_voter("v1")).voter
        assert voter.has_voted is False

    @pytest.mark.asyncio
    async def test_period_end_is_inclusive(self, open_usecase, clock):
        await add_candidates(open_usecase, "Alice")
        await register(open_usecase, "v1")

        clock.now = NOW + timedelta(hours=1)
        output = await vote(open_usecase, "v1", 1)

        assert output.success is True

    @pytest.mark.asyncio
    async def test_gate_is_checked_before_voter_state(self, usecase):
        """期間外では未登録の有権者でもVotingNotActiveが返ること."""
        output = await vote(usecase, "stranger", 99)

        assert output.error_code == "VotingNotActive"

    @pytest.mark.asyncio
    async def test_add_candidate_is_not_period_gated(self, usecase):
        """候補者登録は投票期間外でも管理者なら行えること."""
        output = await usecase.add_candidate(
            AddCandidateInputDto(caller_id=ADMIN, name="Alice")
        )

        assert output.success is True
        assert output.candidate_id == 1

    @pytest.mark.asyncio
    async def test_add_candidate_requires_admin(self, usecase):
        output = await usecase.add_candidate(
            AddCandidateInputDto(caller_id="mallory", name="Alice")
        )

        assert output.error_code == "Unauthorized"
        assert (await usecase.list_candidates()).candidates == []

    @pytest.mark.asyncio
    async def test_always_open_gate(self):
        usecase = create_in_memory_usecase(
            admin_ids=[ADMIN], period_gate=AlwaysOpenPeriodGate()
        )

        output = await usecase.register_voter(RegisterVoterInputDto(voter_id="alice"))

        assert output.success is True


class TestElectionScenarios:
    """選挙全体のシナリオテスト."""

    @pytest.mark.asyncio
    async def test_two_way_tie(self, open_usecase):
        """2候補に1票ずつ入ると両者が投票順に首位になること."""
        await add_candidates(open_usecase, "Alice", "Bob")
        await register(open_usecase, "v1", "v2")

        await vote(open_usecase, "v1", 2)
        await vote(open_usecase, "v2", 1)

        winners = (await open_usecase.get_winners()).winners
        assert [(w.id, w.name, w.vote_count) for w in winners] == [
            (2, "Bob", 1),
            (1, "Alice", 1),
        ]
        assert (await open_usecase.get_total_votes()).total_votes == 2

    @pytest.mark.asyncio
    async def test_single_winner(self, open_usecase):
        await add_candidates(open_usecase, "Alice", "Bob", "Carol")
        await register(open_usecase, "v1", "v2", "v3")

        await vote(open_usecase, "v1", 3)
        await vote(open_usecase, "v2", 3)
        await vote(open_usecase, "v3", 1)

        winners = (await open_usecase.get_winners()).winners
        assert [(w.name, w.vote_count) for w in winners] == [("Carol", 2)]

    @pytest.mark.asyncio
    async def test_delegation_to_voted_voter(self, open_usecase):
        """投票済みの有権者への委任は即時加算され、総数は増えないこと."""
        await add_candidates(open_usecase, "Alice", "Bob")
        await register(open_usecase, "v1", "v2")
        await vote(open_usecase, "v2", 2)

        output = await delegate(open_usecase, "v1", "v2")

        assert output.success is True
        assert output.events[0].event_type == ElectionEventType.VOTE_CAST
        assert output.events[0].payload["delegated"] is True
        candidate = (await open_usecase.get_candidate(2)).candidate
        assert candidate.vote_count == 2
        assert (await open_usecase.get_total_votes()).total_votes == 1

    @pytest.mark.asyncio
    async def test_delegation_to_pending_voter_is_not_retroactive(self, open_usecase):
        """未投票の有権者への委任は、委任先が後で投票しても加算されないこと."""
        await add_candidates(open_usecase, "Alice", "Bob")
        await register(open_usecase, "v1", "v2")

        output = await delegate(open_usecase, "v1", "v2")
        assert output.events[0].event_type == ElectionEventType.VOTE_DELEGATED

        await vote(open_usecase, "v2", 1)

        candidate = (await open_usecase.get_candidate(1)).candidate
        assert candidate.vote_count == 1
        voter = (await open_usecase.get_voter("v2")).voter
        assert voter.delegate_of == "v1"

        second = await vote(open_usecase, "v1", 1)
        assert second.error_code == "AlreadyVoted"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("candidate_id", [0, 3])
    async def test_invalid_candidate_id(self, open_usecase, candidate_id):
        """無効な候補者IDへの投票は状態を変更しないこと."""
        await add_candidates(open_usecase, "Alice", "Bob")
        await register(open_usecase, "v1")

        output = await vote(open_usecase, "v1", candidate_id)

        assert output.success is False
        assert output.error_code == "InvalidCandidateId"
        voter = (await open_usecase.get_voter("v1")).voter
        assert voter.has_voted is False
        assert (await open_usecase.get_total_votes()).total_votes == 0
        assert (await open_usecase.get_winners()).winners == []

    @pytest.mark.asyncio
    async def test_unregistered_voter_cannot_vote(self, open_usecase):
        await add_candidates(open_usecase, "Alice")

        output = await vote(open_usecase, "stranger", 1)

        assert output.error_code == "NotRegistered"

    @pytest.mark.asyncio
    async def test_registration_is_not_idempotent(self, open_usecase):
        await register(open_usecase, "v1")

        output = await open_usecase.register_voter(RegisterVoterInputDto(voter_id="v1"))

        assert output.error_code == "AlreadyRegistered"

    @pytest.mark.asyncio
    async def test_voting_twice_fails(self, open_usecase):
        await add_candidates(open_usecase, "Alice", "Bob")
        await register(open_usecase, "v1")
        await vote(open_usecase, "v1", 1)

        output = await vote(open_usecase, "v1", 2)

        assert output.error_code == "AlreadyVoted"
        assert (await open_usecase.get_candidate(2)).candidate.vote_count == 0

    @pytest.mark.asyncio
    async def test_duplicate_candidate(self, open_usecase):
        await add_candidates(open_usecase, "Alice")

        output = await open_usecase.add_candidate(
            AddCandidateInputDto(caller_id=ADMIN, name="Alice")
        )

        assert output.error_code == "DuplicateCandidate"
        assert output.candidate_id is None

    @pytest.mark.asyncio
    async def test_self_delegation(self, open_usecase):
        await register(open_usecase, "v1")

        output = await delegate(open_usecase, "v1", "v1")

        assert output.error_code == "SelfDelegation"

    @pytest.mark.asyncio
    async def test_delegate_not_registered(self, open_usecase):
        await register(open_usecase, "v1")

        output = await delegate(open_usecase, "v1", "stranger")

        assert output.error_code == "DelegateNotRegistered"

    @pytest.mark.asyncio
    async def test_concurrent_votes_are_serialized(self, open_usecase):
        """並行に投票しても票と首位集合が一貫していること."""
        await add_candidates(open_usecase, "Alice", "Bob")
        voter_ids = [f"v{i}" for i in range(10)]
        await register(open_usecase, *voter_ids)

        outputs = await asyncio.gather(
            *[
                vote(open_usecase, voter_id, 1 + i % 2)
                for i, voter_id in enumerate(voter_ids)
            ]
        )

        assert all(o.success for o in outputs)
        assert (await open_usecase.get_total_votes()).total_votes == 10
        candidates = (await open_usecase.list_candidates()).candidates
        assert [c.vote_count for c in candidates] == [5, 5]
        assert len((await open_usecase.get_winners()).winners) == 2

class TestLeaderSetAgainstRecount:
    """直接投票と委任を混ぜた操作列で、首位集合を再集計結果と照合するテスト."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("seed", range(20))
    async def test_random_votes_and_delegations(self, seed):
        rng = random.Random(seed)
        usecase = create_in_memory_usecase(
            admin_ids=[ADMIN], period_gate=AlwaysOpenPeriodGate()
        )
        candidate_count = rng.randint(1, 4)
        await add_candidates(usecase, *[f"c{i}" for i in range(candidate_count)])
        voter_ids = [f"v{i}" for i in range(rng.randint(2, 12))]
        await register(usecase, *voter_ids)

        counts = dict.fromkeys(range(1, candidate_count + 1), 0)
        # None: 未投票, 0: 委任で投票権を使用, 1以上: 直接投票した候補者ID
        choices: dict[str, int | None] = dict.fromkeys(voter_ids, None)

        for _ in range(len(voter_ids) * 2):
            if rng.random() < 0.5:
                voter_id = rng.choice(voter_ids)
                candidate_id = rng.randint(0, candidate_count + 1)
                output = await vote(usecase, voter_id, candidate_id)
                expected_success = (
                    choices[voter_id] is None and candidate_id in counts
                )
                if expected_success:
                    choices[voter_id] = candidate_id
                    counts[candidate_id] += 1
            else:
                from_voter_id = rng.choice(voter_ids)
                to_voter_id = rng.choice(voter_ids)
                output = await delegate(usecase, from_voter_id, to_voter_id)
                expected_success = (
                    from_voter_id != to_voter_id
                    and choices[from_voter_id] is None
                    and choices[to_voter_id] != 0
                )
                if expected_success:
                    choices[from_voter_id] = 0
                    if choices[to_voter_id]:
                        counts[choices[to_voter_id]] += 1

            assert output.success is expected_success, (seed, output.error_code)
            candidates = (await usecase.list_candidates()).candidates
            assert {c.id: c.vote_count for c in candidates} == counts
            highest = max(c.vote_count for c in candidates)
            winner_ids = [w.id for w in (await usecase.get_winners()).winners]
            assert len(winner_ids) == len(set(winner_ids))
            assert set(winner_ids) == {
                c.id for c in candidates if c.vote_count == highest > 0
            }

        total = (await usecase.get_total_votes()).total_votes
        assert total == sum(1 for choice in choices.values() if choice)



class TestQueries:
    """参照操作のテスト."""

    @pytest.mark.asyncio
    async def test_get_unknown_voter_returns_zero_value(self, usecase):
        output = await usecase.get_voter("nobody")

        assert output.success is True
        assert output.voter.is_registered is False
        assert output.voter.voted_candidate_id is None

    @pytest.mark.asyncio
    async def test_get_candidate_invalid_id(self, usecase):
        output = await usecase.get_candidate(1)

        assert output.success is False
        assert output.error_code == "InvalidCandidateId"

    @pytest.mark.asyncio
    async def test_announce_winners_emits_event(self, open_usecase):
        await add_candidates(open_usecase, "Alice", "Bob")
        await register(open_usecase, "v1")
        await vote(open_usecase, "v1", 2)

        output = await open_usecase.announce_winners()

        assert [w.id for w in output.winners] == [2]
        assert output.events[0].event_type == ElectionEventType.WINNERS_SELECTED
        assert output.events[0].payload == {"candidate_ids": [2]}


class TestTransactionHandling:
    """コミット・ロールバックのテスト."""

    @pytest.fixture
    def session_adapter(self, usecase):
        adapter = AsyncMock(spec=ISessionAdapter)
        usecase.session_adapter = adapter
        return adapter

    @pytest.mark.asyncio
    async def test_success_commits(self, usecase, session_adapter):
        await usecase.add_candidate(AddCandidateInputDto(caller_id=ADMIN, name="Alice"))

        session_adapter.commit.assert_awaited_once()
        session_adapter.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rule_violation_rolls_back(self, usecase, session_adapter):
        await usecase.add_candidate(AddCandidateInputDto(caller_id="mallory", name="A"))

        session_adapter.rollback.assert_awaited_once()
        session_adapter.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_database_error_is_reported(self, usecase, session_adapter):
        usecase.candidate_registry.candidate_repository.create = AsyncMock(
            side_effect=DatabaseError("Failed to create candidates", {"error": "boom"})
        )

        output = await usecase.add_candidate(
            AddCandidateInputDto(caller_id=ADMIN, name="Alice")
        )

        assert output.success is False
        assert output.error_code == "DatabaseError"
        assert output.error_message == "Failed to create candidates"
        session_adapter.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unexpected_error_rolls_back_and_propagates(
        self, usecase, session_adapter
    ):
        usecase.candidate_registry.candidate_repository.create = AsyncMock(
            side_effect=RuntimeError("unexpected")
        )

        with pytest.raises(RuntimeError, match="unexpected"):
            await usecase.add_candidate(
                AddCandidateInputDto(caller_id=ADMIN, name="Alice")
            )

        session_adapter.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_lock_is_released_after_failure(self, usecase, session_adapter):
        """例外の後も次の操作が実行できること."""
        create = usecase.candidate_registry.candidate_repository.create
        usecase.candidate_registry.candidate_repository.create = AsyncMock(
            side_effect=RuntimeError("unexpected")
        )
        with pytest.raises(RuntimeError):
            await usecase.add_candidate(AddCandidateInputDto(caller_id=ADMIN, name="A"))

        usecase.candidate_registry.candidate_repository.create = create
        output = await usecase.add_candidate(
            AddCandidateInputDto(caller_id=ADMIN, name="A")
        )

        assert output.success is True

    @pytest.mark.asyncio
    async def test_write_lock_is_taken_before_changes(self, usecase, session_adapter):
        """更新操作は最初に書き込みロックを取得し、最後にコミットすること."""
        await usecase.add_candidate(AddCandidateInputDto(caller_id=ADMIN, name="Alice"))

        assert [c[0] for c in session_adapter.mock_calls] == [
            "lock_for_write",
            "commit",
        ]

    @pytest.mark.asyncio
    async def test_query_releases_read_transaction(self, usecase, session_adapter):
        """参照操作は書き込みロックを取らず、終了時にトランザクションを閉じること."""
        await usecase.list_candidates()

        session_adapter.lock_for_write.assert_not_awaited()
        session_adapter.rollback.assert_awaited_once()
        session_adapter.commit.assert_not_awaited()


class TrackingSessionAdapter(NoOpSessionAdapter):
    """書き込みロックからコミットまでの区間が重なった数を記録する."""

    def __init__(self, tracker: dict[str, int]):
        self.tracker = tracker

    async def lock_for_write(self) -> None:
        self.tracker["active"] += 1
        self.tracker["max_active"] = max(
            self.tracker["max_active"], self.tracker["active"]
        )
        await asyncio.sleep(0)

    async def commit(self) -> None:
        await asyncio.sleep(0)
        self.tracker["active"] -= 1

    async def rollback(self) -> None:
        self.tracker["active"] = max(self.tracker["active"] - 1, 0)


class TestSharedOperationLock:
    """同じ選挙を扱う複数のユースケース間の直列化のテスト."""

    @pytest.mark.asyncio
    async def test_usecases_sharing_a_lock_never_overlap(self):
        """ロックを共有するユースケースの更新操作が重ならないこと."""
        candidate_repository = InMemoryCandidateRepositoryImpl()
        voter_repository = InMemoryVoterRepositoryImpl()
        election_repository = InMemoryElectionRepositoryImpl()
        tracker = {"active": 0, "max_active": 0}
        lock = asyncio.Lock()

        def build() -> ConductElectionUseCase:
            return ConductElectionUseCase(
                candidate_repository=candidate_repository,
                voter_repository=voter_repository,
                election_repository=election_repository,
                period_gate=AlwaysOpenPeriodGate(),
                admin_authority=StaticAdminAuthority([ADMIN]),
                session_adapter=TrackingSessionAdapter(tracker),
                lock=lock,
            )

        await add_candidates(build(), "Alice", "Bob")
        voter_ids = [f"v{i}" for i in range(8)]
        await register(build(), *voter_ids)

        outputs = await asyncio.gather(
            *[
                vote(build(), voter_id, 1 + i % 2)
                for i, voter_id in enumerate(voter_ids)
            ]
        )

        assert all(o.success for o in outputs)
        assert tracker["max_active"] == 1
        assert (await build().get_total_votes()).total_votes == 8
