# tests/conftest.py
from __future__ import annotations

import base64
import os
from collections.abc import Generator, Iterator
from typing import Any

import pytest

CONTRACT = "erd1qqqqqqqqqqqqqpgq7ykazrzd905zvnlr88dpfw06677lxe9w0n4suz00uh"

os.environ["CHALLENGE_CONTRACT_ADDRESS"] = CONTRACT
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["INGESTION_ENABLED"] = "false"
os.environ["CACHING_ENABLED"] = "false"

from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from challenge_indexer.db.session import Base  # noqa: E402
from challenge_indexer.db.session import get_db as app_get_session  # noqa: E402
from challenge_indexer.main import app as fastapi_app  # noqa: E402
from challenge_indexer.repositories.challenge_repo import (  # noqa: E402
    SqlAlchemyChallengeRepository,
)
from challenge_indexer.services.normalizer import (  # noqa: E402
    NormalizedTransaction,
    normalize_transaction,
)

TEST_DB_URL = "sqlite://"


def encode_call(text: str) -> str:
    """Return base64 call data for ``functionName@arg...``."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def raw_tx(
    tx_hash: str,
    call: str | None,
    *,
    sender: str | None = "alice",
    timestamp: int | None = None,
    receiver: str | None = CONTRACT,
    **extra: Any,
) -> dict[str, Any]:
    """Build a gateway-shaped transaction record."""
    record: dict[str, Any] = {"txHash": tx_hash, **extra}
    if sender is not None:
        record["sender"] = sender
    if receiver is not None:
        record["receiver"] = receiver
    if call is not None:
        record["data"] = encode_call(call)
    if timestamp is not None:
        record["timestamp"] = timestamp
    return record


def make_tx(tx_hash: str, call: str | None, **kwargs: Any) -> NormalizedTransaction:
    """Build a normalized transaction the way the fetcher would."""
    tx = normalize_transaction(raw_tx(tx_hash, call, **kwargs))
    assert tx is not None
    return tx


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def repository(db_session: Session) -> SqlAlchemyChallengeRepository:
    return SqlAlchemyChallengeRepository(db_session)


@pytest.fixture()
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client
