"""Tests for the command-line entry points."""

import json

import httpx
import pytest

from challenge_indexer.core.errors import ConfigError
from challenge_indexer.core.settings import load_settings
from challenge_indexer.scripts import ingest_once
from challenge_indexer.scripts.migrate import build_alembic_config
from challenge_indexer.services.gateway import GatewayClient, GatewayConfig
from tests.conftest import raw_tx


def _client(handler) -> GatewayClient:
    return GatewayClient(
        GatewayConfig(base_url="https://gateway.test", timeout_seconds=1.0),
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_run_once_projects_a_batch(session_factory):
    client = _client(
        lambda request: httpx.Response(
            200, json=[raw_tx("0xA", "createChallenge@01@02", timestamp=10)]
        )
    )

    report = await ingest_once.run_once(
        load_settings(_env_file=None), client=client, session_factory=session_factory
    )

    assert report.applied == 1


@pytest.mark.asyncio
async def test_run_once_reports_gateway_failure(session_factory):
    client = _client(lambda request: httpx.Response(500, text="boom"))

    report = await ingest_once.run_once(
        load_settings(_env_file=None), client=client, session_factory=session_factory
    )

    assert report is None


def test_main_exits_2_on_bad_config(mocker, capsys):
    mocker.patch.object(ingest_once, "get_settings", side_effect=ConfigError("missing address"))

    assert ingest_once.main([]) == 2
    assert "missing address" in capsys.readouterr().err


def test_main_prints_report(mocker, capsys):
    report = mocker.MagicMock()
    report.as_dict.return_value = {"received": 1, "applied": 1}
    mocker.patch.object(ingest_once, "run_once", new=mocker.AsyncMock(return_value=report))

    assert ingest_once.main([]) == 0
    assert json.loads(capsys.readouterr().out) == {"received": 1, "applied": 1}


def test_main_exits_1_when_gateway_unavailable(mocker):
    mocker.patch.object(ingest_once, "run_once", new=mocker.AsyncMock(return_value=None))

    assert ingest_once.main([]) == 1


def test_alembic_config_points_at_migrations():
    cfg = build_alembic_config("sqlite:///./other.db")

    assert cfg.get_main_option("sqlalchemy.url") == "sqlite:///./other.db"
    assert cfg.get_main_option("script_location").endswith("migrations")
