"""Database session configuration."""

from __future__ import annotations

from collections.abc import Generator
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from challenge_indexer.core.settings import get_settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import challenge_indexer.models  # noqa: E402,F401


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Return the engine for the configured database, creating it on first use."""
    settings = get_settings()
    connect_args: dict[str, object] = {}
    if settings.database_url.startswith("sqlite"):
        # Projection runs on a worker thread while the API serves reads.
        connect_args["check_same_thread"] = False
    return create_engine(
        settings.database_url,
        pool_pre_ping=True,
        echo=settings.sql_debug,
        connect_args=connect_args,
    )


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker[Session]:
    """Return the session factory bound to :func:`get_engine`."""
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def create_tables(engine: Engine | None = None) -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=engine or get_engine())


def drop_tables(engine: Engine | None = None) -> None:
    """Drop all database tables."""
    Base.metadata.drop_all(bind=engine or get_engine())
