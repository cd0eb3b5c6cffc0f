# src/challenge_indexer/schemas/challenge.py
"""Challenge-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ChallengeResponse(BaseModel):
    """Schema for challenge information returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Hash of the creating transaction")
    creator: str
    start_timestamp: int
    end_timestamp: int
    reward_budget: str = Field(..., description="Decimal string, arbitrary precision")
    reward_per_point: str = Field(..., description="Decimal string, arbitrary precision")
    active: bool
    created_tx_hash: str
    closed_tx_hash: str | None = None
    last_updated_tx_hash: str
    opened_at: datetime | None = None
    opened_timestamp_ms: int | None = None
    closed_at: datetime | None = None


class ParticipantResponse(BaseModel):
    """Schema for a participant's standing in a challenge."""

    model_config = ConfigDict(from_attributes=True)

    challenge_id: str
    address: str
    score: str = Field(..., description="Decimal string, arbitrary precision")
    join_tx_hash: str
    joined_at: datetime | None = None
    last_update_tx_hash: str | None = None
    last_score_change_at: datetime | None = None
