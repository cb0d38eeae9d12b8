"""Async database configuration and session management."""

import asyncio

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ballotbox.infrastructure.config.settings import Settings, get_settings
from ballotbox.infrastructure.persistence.sqlalchemy_models import Base


def use_immediate_transactions(engine: AsyncEngine) -> None:
    """Make every SQLite transaction start with ``BEGIN IMMEDIATE``.

    A deferred transaction takes its write lock only at the first write, and
    two sessions upgrading from a read lock fail with "database is locked"
    without waiting. ``BEGIN IMMEDIATE`` takes the write lock up front, so
    a second writer waits for the busy timeout instead.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        # the driver must not emit its own deferred BEGIN
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class AsyncDatabase:
    """Async database manager.

    イベントループごとにエンジンを管理することで、CLIとテストのように
    異なるイベントループから呼び出されても安全に動作します。
    """

    def __init__(self, settings: Settings | None = None):
        """Initialize async database manager.

        Args:
            settings: 設定（省略時はget_settings()の値）
        """
        self._async_url = (settings or get_settings()).get_database_url()
        # イベントループごとのエンジンをキャッシュ
        self._engines: dict[int, AsyncEngine] = {}
        self._session_makers: dict[int, async_sessionmaker[AsyncSession]] = {}

    @property
    def url(self) -> str:
        return self._async_url

    def _get_engine_and_session_maker(
        self,
    ) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
        """現在のイベントループに対応するエンジンとセッションメーカーを取得する。"""
        try:
            loop_id = id(asyncio.get_running_loop())
        except RuntimeError:
            # イベントループが存在しない場合は0をIDとして使用
            loop_id = 0

        if loop_id not in self._engines:
            engine = create_async_engine(self._async_url, echo=False)
            if engine.dialect.name == "sqlite":
                use_immediate_transactions(engine)
            self._engines[loop_id] = engine
            self._session_makers[loop_id] = async_sessionmaker(
                engine, class_=AsyncSession, expire_on_commit=False
            )

        return self._engines[loop_id], self._session_makers[loop_id]

    @property
    def engine(self) -> AsyncEngine:
        """現在のイベントループに対応するエンジンを取得する。"""
        engine, _ = self._get_engine_and_session_maker()
        return engine

    @property
    def async_session_maker(self) -> async_sessionmaker[AsyncSession]:
        """現在のイベントループに対応するセッションメーカーを取得する。"""
        _, session_maker = self._get_engine_and_session_maker()
        return session_maker

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession]:
        """Get an async database session.

        The caller owns commits; anything left uncommitted when the block
        raises is rolled back.

        Yields:
            AsyncSession: Database session
        """
        async with self.async_session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def create_schema(self) -> None:
        """Create all election tables that do not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Dispose the engine bound to the current event loop."""
        try:
            loop_id = id(asyncio.get_running_loop())
        except RuntimeError:
            loop_id = 0
        engine = self._engines.pop(loop_id, None)
        self._session_makers.pop(loop_id, None)
        if engine is not None:
            await engine.dispose()
