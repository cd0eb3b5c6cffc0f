# src/challenge_indexer/scripts/migrate.py
from __future__ import annotations

import os

from alembic import command
from alembic.config import Config

from challenge_indexer.core.settings import get_settings

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".."))


def build_alembic_config(database_url: str | None = None) -> Config:
    """Return an Alembic config pointed at the project's migrations."""
    cfg = Config(os.path.join(PROJECT_ROOT, "alembic.ini"))
    cfg.set_main_option("script_location", os.path.join(PROJECT_ROOT, "migrations"))
    cfg.set_main_option("sqlalchemy.url", database_url or get_settings().database_url)
    return cfg


def run_upgrade_head(database_url: str | None = None) -> None:
    command.upgrade(build_alembic_config(database_url), "head")


if __name__ == "__main__":
    run_upgrade_head()
