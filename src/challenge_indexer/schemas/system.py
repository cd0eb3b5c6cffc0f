# src/challenge_indexer/schemas/system.py
"""Schemas for ingestion status reporting."""

from typing import Any

from pydantic import BaseModel


class DedupStatus(BaseModel):
    size: int
    capacity: int
    latest_timestamp_ms: int | None


class IngestionStatusResponse(BaseModel):
    """Snapshot of the ingestion scheduler and pipeline."""

    enabled: bool
    contract_address: str
    state: str | None = None
    timer_armed: bool = False
    interval_seconds: float | None = None
    completed_cycles: int = 0
    skipped_triggers: int = 0
    dedup: DedupStatus | None = None
    last_report: dict[str, int] | None = None
    last_error: dict[str, Any] | None = None
    gateway: dict[str, Any] | None = None
