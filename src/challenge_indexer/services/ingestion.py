"""One ingestion cycle (fetch, then project) and its wiring.

This module provides the IngestionPipeline class, which performs a single
fetch-and-project pass, and :func:`build_ingestion_service`, which assembles
the fetcher, projector and scheduler from settings.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Any

from sqlalchemy.orm import Session, sessionmaker

from challenge_indexer.core.errors import FetchError
from challenge_indexer.core.settings import Settings
from challenge_indexer.db.session import get_session_factory
from challenge_indexer.repositories.challenge_repo import SqlAlchemyChallengeRepository
from challenge_indexer.services.dedup import DedupWindow
from challenge_indexer.services.gateway import (
    GatewayClient,
    TransactionFetcher,
    load_gateway_config,
)
from challenge_indexer.services.normalizer import NormalizedTransaction
from challenge_indexer.services.projector import ChallengeProjector, ProjectionReport
from challenge_indexer.services.scheduler import IngestionScheduler

# Configure logger for this module
logger = logging.getLogger(__name__)


class IngestionPipeline:
    """Fetches the contract's latest calls and projects them.

    Projection runs on a worker thread with its own session; the scheduler
    guarantees only one cycle at a time, so the projector's dedup window is
    never touched concurrently.
    """

    def __init__(
        self,
        fetcher: TransactionFetcher,
        projector: ChallengeProjector,
        session_factory: sessionmaker[Session] | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.projector = projector
        self._session_factory = session_factory
        self.last_report: ProjectionReport | None = None
        self.last_error: FetchError | None = None

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._session_factory is None:
            self._session_factory = get_session_factory()
        return self._session_factory

    async def run_cycle(self) -> ProjectionReport | None:
        """Run one pass; return ``None`` when the gateway could not be read."""
        try:
            transactions = await self.fetcher.fetch()
        except FetchError as exc:
            self.last_error = exc
            logger.warning(
                "Fetching contract transactions failed: %s (status=%s, body=%.200s)",
                exc,
                exc.status_code,
                exc.body,
            )
            return None

        self.last_error = None
        report = await asyncio.to_thread(self.project, transactions)
        self.last_report = report
        if report.applied or report.failed:
            logger.info("Ingestion cycle finished: %s", report.as_dict())
        else:
            logger.debug("Ingestion cycle finished: %s", report.as_dict())
        return report

    def project(self, transactions: Sequence[NormalizedTransaction]) -> ProjectionReport:
        """Project ``transactions`` inside a fresh session."""
        with self.session_factory() as session:
            repository = SqlAlchemyChallengeRepository(session)
            return self.projector.apply(transactions, repository)


@dataclass(frozen=True)
class IngestionService:
    """Pipeline plus the scheduler that drives it."""

    pipeline: IngestionPipeline
    scheduler: IngestionScheduler

    async def start(self) -> None:
        await self.scheduler.start()

    async def stop(self) -> None:
        await self.scheduler.stop()

    def status(self) -> dict[str, Any]:
        """Return a JSON-friendly snapshot for the status endpoint."""
        last_error = self.pipeline.last_error
        return {
            "state": self.scheduler.state.value,
            "timer_armed": self.scheduler.timer_armed,
            "interval_seconds": self.scheduler.interval_seconds,
            "completed_cycles": self.scheduler.completed_cycles,
            "skipped_triggers": self.scheduler.skipped_triggers,
            "dedup": asdict(self.pipeline.projector.window.snapshot()),
            "last_report": (
                self.pipeline.last_report.as_dict() if self.pipeline.last_report else None
            ),
            "last_error": (
                {"message": str(last_error), "status_code": last_error.status_code}
                if last_error is not None
                else None
            ),
            "gateway": self.pipeline.fetcher.client.metrics.as_dict(),
        }


def build_ingestion_service(
    settings: Settings,
    *,
    client: GatewayClient | None = None,
    session_factory: sessionmaker[Session] | None = None,
) -> IngestionService:
    """Assemble the ingestion service from settings."""
    fetcher = TransactionFetcher(
        client or GatewayClient(load_gateway_config(settings)),
        settings.challenge_contract_address,
        batch_size=settings.tx_fetch_size,
    )
    projector = ChallengeProjector(DedupWindow(settings.dedup_window_size))
    pipeline = IngestionPipeline(fetcher, projector, session_factory)
    scheduler = IngestionScheduler(pipeline.run_cycle, settings.poll_interval_seconds)
    return IngestionService(pipeline=pipeline, scheduler=scheduler)
