"""Logging setup shared by the API process and scripts."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Install a root handler at ``level`` unless one is already configured."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("challenge_indexer").setLevel(level)
    # httpx logs every request at INFO; keep it quieter than our own cycle logs.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
