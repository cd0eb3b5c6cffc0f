# src/challenge_indexer/models/participant.py
"""SQLAlchemy model for challenge participants and their scores."""

from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from challenge_indexer.db.session import Base
from challenge_indexer.db.time import utcnow
from challenge_indexer.models.challenge import TX_HASH_LENGTH


class ChallengeParticipant(Base):
    """Score row keyed by (challenge, participant address)."""

    __tablename__ = "challenge_participants"
    __table_args__ = (Index("ix_challenge_participants_challenge_id", "challenge_id"),)

    challenge_id: Mapped[str] = mapped_column(String(TX_HASH_LENGTH), primary_key=True)
    address: Mapped[str] = mapped_column(String(TX_HASH_LENGTH), primary_key=True)
    # Monotonic, arbitrary-precision; only ever grows by submitted points.
    score: Mapped[str] = mapped_column(Text, nullable=False, default="0")

    join_tx_hash: Mapped[str] = mapped_column(String(TX_HASH_LENGTH), nullable=False)
    joined_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_update_tx_hash: Mapped[str | None] = mapped_column(
        String(TX_HASH_LENGTH), nullable=True
    )
    last_score_change_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
