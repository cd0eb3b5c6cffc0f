# src/challenge_indexer/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .challenges import router as challenges_router
from .system import router as system_router
from .transactions import router as transactions_router

__all__ = [
    "challenges_router",
    "system_router",
    "transactions_router",
]
