"""SQLAlchemy ORM models for the election tables."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all ballotbox tables."""


class CandidateModel(Base):
    """候補者テーブル. idは登録順の連番をアプリケーション側で採番する."""

    __tablename__ = "candidates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    vote_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class VoterModel(Base):
    """有権者テーブル. voter_idで一意."""

    __tablename__ = "voters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    voter_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    is_registered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_voted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    voted_candidate_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    delegate_of: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class ElectionModel(Base):
    """選挙状態テーブル. 1データベースにつき1行."""

    __tablename__ = "elections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    start_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    end_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    total_votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    highest_vote_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    leading_candidate_ids: Mapped[list[int]] = mapped_column(
        JSON, nullable=False, default=list
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
