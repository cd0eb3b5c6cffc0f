"""UTC clock and chain-time conversion for persisted timestamps."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def from_epoch_ms(timestamp_ms: int) -> datetime | None:
    """Convert a block timestamp in epoch milliseconds to an aware UTC datetime.

    Returns ``None`` when the value lies outside what ``datetime`` can hold.
    """
    try:
        return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None
