"""Tests for the latest-transactions endpoint."""

from unittest.mock import AsyncMock

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from challenge_indexer.api.v1.dependencies import get_latest_transactions_service
from challenge_indexer.core.errors import FetchError
from challenge_indexer.services.tx_cache import LatestTransactionsService


@pytest.fixture
def latest_service(app):
    service = AsyncMock(spec=LatestTransactionsService)
    app.dependency_overrides[get_latest_transactions_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_latest_transactions_service, None)


def test_latest_transactions(client: TestClient, latest_service) -> None:
    latest_service.get_latest.return_value = [{"txHash": "t1"}]

    r = client.get("/api/v1/transactions/latest")

    assert r.status_code == status.HTTP_200_OK
    assert r.json() == [{"txHash": "t1"}]


def test_upstream_status_is_forwarded(client: TestClient, latest_service) -> None:
    latest_service.get_latest.side_effect = FetchError(
        "gateway error", status_code=429, body="rate limited"
    )

    r = client.get("/api/v1/transactions/latest")

    assert r.status_code == 429
    assert r.json()["detail"] == "rate limited"


def test_transport_failure_is_bad_gateway(client: TestClient, latest_service) -> None:
    latest_service.get_latest.side_effect = FetchError("connection refused")

    r = client.get("/api/v1/transactions/latest")

    assert r.status_code == status.HTTP_502_BAD_GATEWAY
    assert r.json()["detail"] == "Error fetching transactions"
