# src/challenge_indexer/api/v1/dependencies.py
"""Shared FastAPI dependencies."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from challenge_indexer.core.settings import Settings, get_settings
from challenge_indexer.db.session import get_db
from challenge_indexer.repositories.challenge_repo import SqlAlchemyChallengeRepository
from challenge_indexer.services.ingestion import IngestionService
from challenge_indexer.services.tx_cache import LatestTransactionsService

SessionDep = Annotated[Session, Depends(get_db)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_challenge_repository(db: SessionDep) -> SqlAlchemyChallengeRepository:
    """Return a repository bound to the request's session."""
    return SqlAlchemyChallengeRepository(db)


def get_ingestion_service(request: Request) -> IngestionService | None:
    """Return the running ingestion service, or None when ingestion is disabled."""
    return getattr(request.app.state, "ingestion", None)


def get_latest_transactions_service(request: Request) -> LatestTransactionsService:
    """Return the latest-transactions service created at startup."""
    service: LatestTransactionsService | None = getattr(
        request.app.state, "latest_transactions", None
    )
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Transaction listing is not initialised",
        )
    return service


RepositoryDep = Annotated[SqlAlchemyChallengeRepository, Depends(get_challenge_repository)]
IngestionDep = Annotated[IngestionService | None, Depends(get_ingestion_service)]
LatestTransactionsDep = Annotated[
    LatestTransactionsService, Depends(get_latest_transactions_service)
]
