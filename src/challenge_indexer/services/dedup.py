"""Bounded in-memory memory of processed transactions.

The window lives only as long as the process. After a restart it is empty and
already-projected transactions may be delivered again; the projector's
handlers stay idempotent for exactly that reason.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

from challenge_indexer.services.normalizer import NormalizedTransaction

DEFAULT_CAPACITY = 500


@dataclass(frozen=True)
class DedupSnapshot:
    """Point-in-time view of the window for status reporting."""

    size: int
    capacity: int
    latest_timestamp_ms: int | None


class DedupWindow:
    """FIFO set of recent transaction hashes plus a timestamp high-water-mark.

    A transaction is novel when its hash is unknown and its timestamp is not
    older than the newest timestamp processed so far. The second condition
    keeps rejecting old transactions after their hash has been evicted.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._order: deque[str] = deque()
        self._members: set[str] = set()
        self.latest_timestamp_ms: int | None = None

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, tx_hash: object) -> bool:
        return tx_hash in self._members

    def is_novel(self, tx: NormalizedTransaction) -> bool:
        """Return True if ``tx`` has not been processed yet."""
        if tx.tx_hash in self._members:
            return False
        if self.latest_timestamp_ms is None:
            return True
        return tx.sort_key >= self.latest_timestamp_ms

    def mark_processed(self, tx: NormalizedTransaction) -> None:
        """Record ``tx`` as processed, evicting the oldest hash when full."""
        if tx.tx_hash not in self._members:
            self._order.append(tx.tx_hash)
            self._members.add(tx.tx_hash)
            while len(self._order) > self.capacity:
                self._members.discard(self._order.popleft())

        if tx.timestamp_ms is not None:
            if self.latest_timestamp_ms is None:
                self.latest_timestamp_ms = tx.timestamp_ms
            else:
                self.latest_timestamp_ms = max(self.latest_timestamp_ms, tx.timestamp_ms)

    def reset(self) -> None:
        """Forget every processed hash and the high-water-mark."""
        self._order.clear()
        self._members.clear()
        self.latest_timestamp_ms = None

    def snapshot(self) -> DedupSnapshot:
        return DedupSnapshot(
            size=len(self._order),
            capacity=self.capacity,
            latest_timestamp_ms=self.latest_timestamp_ms,
        )
