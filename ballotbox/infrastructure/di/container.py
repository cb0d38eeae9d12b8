"""Dependency wiring for the CLI and library callers.

The container owns the database manager and builds a
``ConductElectionUseCase`` whose repositories share one session, so that
each CLI invocation runs inside a single transaction. All use cases built
by one container on one event loop share a single operation lock.
"""

import asyncio
import weakref

from collections.abc import AsyncIterator, Callable, Iterable
from contextlib import asynccontextmanager
from datetime import datetime

from ballotbox.application.usecases.conduct_election_usecase import (
    ConductElectionUseCase,
)
from ballotbox.domain.services.interfaces.period_gate import IPeriodGate
from ballotbox.infrastructure.config.async_database import AsyncDatabase
from ballotbox.infrastructure.config.settings import Settings, get_settings
from ballotbox.infrastructure.external.election_period_gate import ElectionPeriodGate
from ballotbox.infrastructure.external.static_admin_authority import (
    StaticAdminAuthority,
)
from ballotbox.infrastructure.persistence.candidate_repository_impl import (
    CandidateRepositoryImpl,
)
from ballotbox.infrastructure.persistence.election_repository_impl import (
    ElectionRepositoryImpl,
)
from ballotbox.infrastructure.persistence.in_memory_repository_impl import (
    InMemoryCandidateRepositoryImpl,
    InMemoryElectionRepositoryImpl,
    InMemoryVoterRepositoryImpl,
)
from ballotbox.infrastructure.persistence.noop_session_adapter import (
    NoOpSessionAdapter,
)
from ballotbox.infrastructure.persistence.sqlalchemy_session_adapter import (
    SQLAlchemySessionAdapter,
)
from ballotbox.infrastructure.persistence.voter_repository_impl import (
    VoterRepositoryImpl,
)


class Container:
    """アプリケーションの依存関係を組み立てるコンテナ."""

    def __init__(
        self,
        settings: Settings,
        clock: Callable[[], datetime] | None = None,
    ):
        self.settings = settings
        self.database = AsyncDatabase(settings)
        self.clock = clock
        # asyncio.Lock cannot be shared across event loops
        self._locks: weakref.WeakKeyDictionary[
            asyncio.AbstractEventLoop, asyncio.Lock
        ] = weakref.WeakKeyDictionary()

    def operation_lock(self) -> asyncio.Lock:
        """現在のイベントループで選挙操作を直列化するロックを返す."""
        loop = asyncio.get_running_loop()
        lock = self._locks.get(loop)
        if lock is None:
            lock = self._locks[loop] = asyncio.Lock()
        return lock

    def admin_authority(self) -> StaticAdminAuthority:
        return StaticAdminAuthority(self.settings.admin_id_list)

    @asynccontextmanager
    async def election_usecase(self) -> AsyncIterator[ConductElectionUseCase]:
        """データベースセッションに束縛されたユースケースを返す."""
        async with self.database.get_session() as session:
            session_adapter = SQLAlchemySessionAdapter(session)
            election_repository = ElectionRepositoryImpl(session_adapter)
            yield ConductElectionUseCase(
                candidate_repository=CandidateRepositoryImpl(session_adapter),
                voter_repository=VoterRepositoryImpl(session_adapter),
                election_repository=election_repository,
                period_gate=ElectionPeriodGate(election_repository),
                admin_authority=self.admin_authority(),
                session_adapter=session_adapter,
                clock=self.clock,
                lock=self.operation_lock(),
            )


def create_in_memory_usecase(
    admin_ids: Iterable[str],
    period_gate: IPeriodGate | None = None,
    clock: Callable[[], datetime] | None = None,
) -> ConductElectionUseCase:
    """インメモリのリポジトリで動くユースケースを作成する.

    Args:
        admin_ids: 管理者として扱う呼び出し元ID
        period_gate: 投票期間の判定（省略時は保存された投票期間を使う）
        clock: 現在日時を返す関数

    Returns:
        ConductElectionUseCase
    """
    election_repository = InMemoryElectionRepositoryImpl()
    return ConductElectionUseCase(
        candidate_repository=InMemoryCandidateRepositoryImpl(),
        voter_repository=InMemoryVoterRepositoryImpl(),
        election_repository=election_repository,
        period_gate=period_gate or ElectionPeriodGate(election_repository),
        admin_authority=StaticAdminAuthority(admin_ids),
        session_adapter=NoOpSessionAdapter(),
        clock=clock,
    )


_container: Container | None = None


def init_container(
    settings: Settings | None = None,
    clock: Callable[[], datetime] | None = None,
) -> Container:
    """グローバルコンテナを初期化する."""
    global _container
    _container = Container(settings or get_settings(), clock=clock)
    return _container


def get_container() -> Container:
    """初期化済みのグローバルコンテナを返す.

    Raises:
        RuntimeError: init_container()が呼ばれていない場合
    """
    if _container is None:
        raise RuntimeError("Container is not initialized. Call init_container().")
    return _container


def reset_container() -> None:
    global _container
    _container = None
