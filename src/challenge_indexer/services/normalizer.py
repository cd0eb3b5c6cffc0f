"""Normalization of raw gateway transaction records.

Upstream APIs disagree on field naming, so every field is looked up through a
fixed list of aliases. Records without any usable hash are dropped; records
without a usable timestamp are kept and order as if stamped at 0.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

HASH_KEYS = ("txHash", "hash", "tx_hash", "identifier", "_id")
TIMESTAMP_MS_KEYS = ("timestampMs", "timestamp_ms")
TIMESTAMP_SECONDS_KEYS = ("timestamp", "blockTimestamp")


@dataclass(frozen=True)
class NormalizedTransaction:
    """Canonical view of a gateway transaction.

    ``raw`` keeps the original record for diagnostics and takes no part in
    equality or ``repr``.
    """

    tx_hash: str
    sender: str | None = None
    receiver: str | None = None
    data: str | None = None
    timestamp_ms: int | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def sort_key(self) -> int:
        return self.timestamp_ms if self.timestamp_ms is not None else 0


def _first_value(raw: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return None


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text or None


def _as_number(value: Any) -> float | None:
    # bool is an int subclass but never a timestamp.
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def extract_timestamp_ms(raw: Mapping[str, Any]) -> int | None:
    """Return the record's timestamp in milliseconds.

    An explicit millisecond field wins over a seconds field; anything
    non-numeric yields ``None``.
    """
    millis = _as_number(_first_value(raw, TIMESTAMP_MS_KEYS))
    if millis is not None:
        return int(millis)
    seconds = _as_number(_first_value(raw, TIMESTAMP_SECONDS_KEYS))
    if seconds is not None:
        return int(seconds * 1000)
    return None


def normalize_transaction(raw: Mapping[str, Any]) -> NormalizedTransaction | None:
    """Normalize one raw record, or return ``None`` when it has no hash."""
    tx_hash = _optional_str(_first_value(raw, HASH_KEYS))
    if tx_hash is None:
        return None

    return NormalizedTransaction(
        tx_hash=tx_hash,
        sender=_optional_str(raw.get("sender")),
        receiver=_optional_str(raw.get("receiver")),
        data=_optional_str(raw.get("data")),
        timestamp_ms=extract_timestamp_ms(raw),
        raw=raw,
    )


def normalize_transactions(records: Iterable[Any]) -> list[NormalizedTransaction]:
    """Normalize a batch, dropping malformed and hashless records."""
    normalized: list[NormalizedTransaction] = []
    for record in records:
        if not isinstance(record, Mapping):
            logger.debug("Ignoring non-mapping transaction record: %r", record)
            continue
        tx = normalize_transaction(record)
        if tx is None:
            logger.debug("Ignoring transaction record without a hash: %r", record)
            continue
        normalized.append(tx)
    return normalized
