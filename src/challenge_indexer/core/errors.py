"""Error taxonomy for the challenge indexer.

Only :class:`ConfigError` is fatal. Every other error is scoped either to a
single ingestion cycle (:class:`FetchError`) or to a single transaction
(:class:`DecodeError`, :class:`PersistenceError`).
"""

from __future__ import annotations


class IndexerError(RuntimeError):
    """Base class for all indexer failures."""


class ConfigError(IndexerError):
    """Raised when required configuration is missing or invalid."""


class FetchError(IndexerError):
    """Raised when the gateway cannot be reached or answers with an error.

    Attributes:
        status_code: Upstream HTTP status, or ``None`` for transport failures.
        body: Upstream response body (or the transport error message).
    """

    def __init__(self, message: str, *, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        base = super().__str__()
        if self.status_code is None:
            return base
        return f"{base} (status={self.status_code})"


class DecodeError(IndexerError):
    """Raised when call data cannot be decoded into a function call."""


class PersistenceError(IndexerError):
    """Raised when the repository fails to read or write projected state."""
