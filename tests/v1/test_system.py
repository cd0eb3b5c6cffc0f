"""Tests for system and health endpoints."""

from unittest.mock import MagicMock

from fastapi import status
from fastapi.testclient import TestClient

from challenge_indexer.api.v1.dependencies import get_ingestion_service
from challenge_indexer.services.ingestion import IngestionService
from tests.conftest import CONTRACT


def test_health(client: TestClient) -> None:
    r = client.get("/health")
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"status": "ok"}


def test_status_with_ingestion_disabled(client: TestClient) -> None:
    r = client.get("/api/v1/system/status")

    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["enabled"] is False
    assert data["contract_address"] == CONTRACT
    assert data["dedup"] is None


def test_status_with_running_ingestion(client: TestClient, app) -> None:
    ingestion = MagicMock(spec=IngestionService)
    ingestion.status.return_value = {
        "state": "idle",
        "timer_armed": True,
        "interval_seconds": 30.0,
        "completed_cycles": 3,
        "skipped_triggers": 1,
        "dedup": {"size": 12, "capacity": 500, "latest_timestamp_ms": 1_700_000_000_000},
        "last_report": {"received": 4, "applied": 1, "skipped": 0, "duplicates": 3, "failed": 0},
        "last_error": None,
        "gateway": {"request_count": 3},
    }
    app.dependency_overrides[get_ingestion_service] = lambda: ingestion
    try:
        r = client.get("/api/v1/system/status")
    finally:
        app.dependency_overrides.pop(get_ingestion_service, None)

    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["enabled"] is True
    assert data["timer_armed"] is True
    assert data["completed_cycles"] == 3
    assert data["dedup"]["capacity"] == 500
    assert data["last_report"]["duplicates"] == 3
