# src/challenge_indexer/api/v1/endpoints/transactions.py
"""Latest network transactions, served through the optional cache."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, status

from challenge_indexer.core.errors import FetchError

from ..dependencies import LatestTransactionsDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("/latest")
async def get_latest_transactions(service: LatestTransactionsDep) -> list[Any]:
    """Return the most recent transactions on the network."""
    try:
        return await service.get_latest()
    except FetchError as exc:
        logger.error("Failed to fetch latest transactions: %s", exc)
        raise HTTPException(
            status_code=exc.status_code or status.HTTP_502_BAD_GATEWAY,
            detail=exc.body or "Error fetching transactions",
        ) from exc
