"""選挙関連テーブル（candidates, voters, elections）を作成.

Revision ID: 001
Revises:
Create Date: 2026-10-18

候補者IDは登録順の連番をアプリケーション側で採番するため、
candidates.id は自動採番しない。
"""

import sqlalchemy as sa

from alembic import op


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """candidates, voters, elections テーブルを作成."""
    op.create_table(
        "candidates",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("vote_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_candidates_name"),
    )

    op.create_table(
        "voters",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("voter_id", sa.String(length=255), nullable=False),
        sa.Column(
            "is_registered", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("has_voted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("voted_candidate_id", sa.Integer(), nullable=True),
        sa.Column("delegate_of", sa.String(length=255), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("voter_id", name="uq_voters_voter_id"),
    )

    op.create_table(
        "elections",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_votes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "highest_vote_count", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("leading_candidate_ids", sa.JSON(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    """テーブルを削除."""
    op.drop_table("elections")
    op.drop_table("voters")
    op.drop_table("candidates")
