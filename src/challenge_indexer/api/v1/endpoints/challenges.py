# src/challenge_indexer/api/v1/endpoints/challenges.py
"""Read endpoints over projected challenges and scores."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from challenge_indexer.models import Challenge, ChallengeParticipant
from challenge_indexer.schemas.challenge import ChallengeResponse, ParticipantResponse

from ..dependencies import RepositoryDep

router = APIRouter(prefix="/challenges", tags=["challenges"])


@router.get("/active", response_model=ChallengeResponse)
async def get_active_challenge(repository: RepositoryDep) -> Challenge:
    """Return the currently active challenge."""
    challenge = repository.find_active_challenge()
    if challenge is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No active challenge",
        )
    return challenge


@router.get("/{challenge_id}", response_model=ChallengeResponse)
async def get_challenge(challenge_id: str, repository: RepositoryDep) -> Challenge:
    """Get a specific challenge by its creation transaction hash."""
    challenge = repository.find_challenge(challenge_id)
    if challenge is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Challenge not found",
        )
    return challenge


@router.get("/{challenge_id}/participants", response_model=list[ParticipantResponse])
async def list_participants(
    challenge_id: str,
    repository: RepositoryDep,
    limit: int | None = Query(default=None, ge=1, le=1000),
) -> list[ChallengeParticipant]:
    """Return the challenge leaderboard, highest score first."""
    if repository.find_challenge(challenge_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Challenge not found",
        )
    return repository.list_participants(challenge_id, limit=limit)
