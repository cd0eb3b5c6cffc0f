# src/challenge_indexer/services/__init__.py
"""Ingestion pipeline services."""

from .decoder import CallKind, DecodedCall, decode_call_data
from .dedup import DedupWindow
from .normalizer import NormalizedTransaction, normalize_transaction
from .projector import ChallengeProjector, ProjectionReport
from .scheduler import IngestionScheduler, SchedulerState

__all__ = [
    "CallKind",
    "ChallengeProjector",
    "DecodedCall",
    "DedupWindow",
    "IngestionScheduler",
    "NormalizedTransaction",
    "ProjectionReport",
    "SchedulerState",
    "decode_call_data",
    "normalize_transaction",
]
