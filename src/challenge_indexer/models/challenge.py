# src/challenge_indexer/models/challenge.py
"""SQLAlchemy model for fitness challenges."""

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from challenge_indexer.db.session import Base
from challenge_indexer.db.time import utcnow

TX_HASH_LENGTH = 64


class Challenge(Base):
    """A challenge opened by a ``createChallenge`` contract call.

    The primary key is the hash of the creating transaction. Rows are never
    deleted; closing or superseding a challenge only clears ``active``.
    """

    __tablename__ = "challenges"
    __table_args__ = (Index("ix_challenges_active", "active"),)

    id: Mapped[str] = mapped_column(String(TX_HASH_LENGTH), primary_key=True)
    creator: Mapped[str] = mapped_column(String(TX_HASH_LENGTH), nullable=False)
    start_timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    end_timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    # Arbitrary-precision integers kept as decimal strings.
    reward_budget: Mapped[str] = mapped_column(Text, nullable=False, default="0")
    reward_per_point: Mapped[str] = mapped_column(Text, nullable=False, default="0")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_tx_hash: Mapped[str] = mapped_column(String(TX_HASH_LENGTH), nullable=False)
    closed_tx_hash: Mapped[str | None] = mapped_column(String(TX_HASH_LENGTH), nullable=True)
    last_updated_tx_hash: Mapped[str] = mapped_column(String(TX_HASH_LENGTH), nullable=False)

    opened_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # Block time of the creating transaction; calls mined earlier belong to older challenges.
    opened_timestamp_ms: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
