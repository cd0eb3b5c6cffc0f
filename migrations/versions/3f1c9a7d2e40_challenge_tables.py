"""challenge and participant tables

Revision ID: 3f1c9a7d2e40
Revises:
Create Date: 2026-10-17 09:12:44.318204

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3f1c9a7d2e40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the projected challenge state tables."""
    op.create_table(
        "challenges",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("creator", sa.String(length=64), nullable=False),
        sa.Column("start_timestamp", sa.BigInteger(), nullable=False),
        sa.Column("end_timestamp", sa.BigInteger(), nullable=False),
        sa.Column("reward_budget", sa.Text(), nullable=False),
        sa.Column("reward_per_point", sa.Text(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("created_tx_hash", sa.String(length=64), nullable=False),
        sa.Column("closed_tx_hash", sa.String(length=64), nullable=True),
        sa.Column("last_updated_tx_hash", sa.String(length=64), nullable=False),
        sa.Column("opened_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("opened_timestamp_ms", sa.BigInteger(), nullable=True),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_challenges_active", "challenges", ["active"])

    op.create_table(
        "challenge_participants",
        sa.Column("challenge_id", sa.String(length=64), nullable=False),
        sa.Column("address", sa.String(length=64), nullable=False),
        sa.Column("score", sa.Text(), nullable=False),
        sa.Column("join_tx_hash", sa.String(length=64), nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_update_tx_hash", sa.String(length=64), nullable=True),
        sa.Column("last_score_change_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("challenge_id", "address"),
    )
    op.create_index(
        "ix_challenge_participants_challenge_id",
        "challenge_participants",
        ["challenge_id"],
    )


def downgrade() -> None:
    """Drop the projected challenge state tables."""
    op.drop_index("ix_challenge_participants_challenge_id", table_name="challenge_participants")
    op.drop_table("challenge_participants")
    op.drop_index("ix_challenges_active", table_name="challenges")
    op.drop_table("challenges")
