# src/challenge_indexer/models/__init__.py
"""SQLAlchemy models for projected challenge state."""

from .challenge import Challenge
from .participant import ChallengeParticipant

__all__ = ["Challenge", "ChallengeParticipant"]
