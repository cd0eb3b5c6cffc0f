# src/challenge_indexer/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import challenges_router, system_router, transactions_router

__all__ = [
    "challenges_router",
    "system_router",
    "transactions_router",
]
