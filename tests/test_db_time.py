"""Tests for chain-time conversion."""

from datetime import UTC, datetime

import pytest

from challenge_indexer.db.time import from_epoch_ms


def test_from_epoch_ms():
    assert from_epoch_ms(1_700_000_000_000) == datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)


@pytest.mark.parametrize("timestamp_ms", [10**22, -(10**22)])
def test_unrepresentable_timestamps_yield_none(timestamp_ms):
    assert from_epoch_ms(timestamp_ms) is None
