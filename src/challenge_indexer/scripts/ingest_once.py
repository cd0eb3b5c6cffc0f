"""Run a single ingestion cycle from the command line and print its report.

Useful for backfills and cron-style deployments where the API server is not
running. Exit status is 0 when the cycle ran, 1 when the gateway could not be
read and 2 on invalid configuration.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from sqlalchemy.orm import Session, sessionmaker

from challenge_indexer.core.errors import ConfigError
from challenge_indexer.core.logging import configure_logging
from challenge_indexer.core.settings import Settings, get_settings
from challenge_indexer.db.session import create_tables
from challenge_indexer.services.gateway import GatewayClient, load_gateway_config
from challenge_indexer.services.ingestion import build_ingestion_service
from challenge_indexer.services.projector import ProjectionReport


async def run_once(
    settings: Settings,
    *,
    client: GatewayClient | None = None,
    session_factory: sessionmaker[Session] | None = None,
) -> ProjectionReport | None:
    """Fetch and project one batch; ``None`` means the gateway failed."""
    client = client or GatewayClient(load_gateway_config(settings))
    service = build_ingestion_service(settings, client=client, session_factory=session_factory)
    try:
        return await service.pipeline.run_cycle()
    finally:
        await client.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="create missing tables before projecting (instead of running migrations)",
    )
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ConfigError as exc:
        print(f"[ingest-once] {exc}", file=sys.stderr)
        return 2

    configure_logging(settings.log_level)
    if args.create_tables:
        create_tables()

    report = asyncio.run(run_once(settings))
    if report is None:
        print("[ingest-once] gateway unavailable, nothing projected", file=sys.stderr)
        return 1
    print(json.dumps(report.as_dict()))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
