# src/challenge_indexer/api/v1/endpoints/system.py
"""Operational endpoints for the ingestion pipeline."""

from __future__ import annotations

from fastapi import APIRouter

from challenge_indexer.schemas.system import IngestionStatusResponse

from ..dependencies import IngestionDep, SettingsDep

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/status", response_model=IngestionStatusResponse)
async def get_ingestion_status(
    ingestion: IngestionDep,
    settings: SettingsDep,
) -> IngestionStatusResponse:
    """Report scheduler state, dedup window occupancy and gateway metrics."""
    if ingestion is None:
        return IngestionStatusResponse(
            enabled=False,
            contract_address=settings.challenge_contract_address,
        )
    return IngestionStatusResponse(
        enabled=True,
        contract_address=settings.challenge_contract_address,
        **ingestion.status(),
    )
