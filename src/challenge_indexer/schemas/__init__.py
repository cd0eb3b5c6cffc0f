# src/challenge_indexer/schemas/__init__.py
"""Pydantic schemas for API response models."""

from .challenge import ChallengeResponse, ParticipantResponse
from .system import IngestionStatusResponse

__all__ = ["ChallengeResponse", "IngestionStatusResponse", "ParticipantResponse"]
