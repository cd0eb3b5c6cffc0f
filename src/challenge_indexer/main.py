# src/challenge_indexer/main.py
"""Main entry point for the challenge indexer."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from challenge_indexer import __version__
from challenge_indexer.api.v1 import challenges_router, system_router, transactions_router
from challenge_indexer.core.logging import configure_logging
from challenge_indexer.core.settings import get_settings
from challenge_indexer.db.session import create_tables
from challenge_indexer.services.gateway import GatewayClient, load_gateway_config
from challenge_indexer.services.ingestion import IngestionService, build_ingestion_service
from challenge_indexer.services.tx_cache import LatestTransactionsService

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Challenge Indexer API",
    description="Fitness challenge state projected from contract transactions",
    version=__version__,
)

# Include API routers
app.include_router(challenges_router, prefix="/api/v1")
app.include_router(transactions_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    # A missing contract address raises ConfigError here and aborts startup.
    settings = get_settings()
    configure_logging(settings.log_level)
    create_tables()

    client = GatewayClient(load_gateway_config(settings))
    app.state.gateway_client = client
    app.state.latest_transactions = LatestTransactionsService.from_settings(settings, client)

    if settings.ingestion_enabled:
        logger.info(
            "Watching %s via %s every %.1fs",
            settings.challenge_contract_address,
            settings.gateway_api_url,
            settings.poll_interval_seconds,
        )
        ingestion = build_ingestion_service(settings, client=client)
        await ingestion.start()
        app.state.ingestion = ingestion
    else:
        app.state.ingestion = None


@app.on_event("shutdown")
async def on_shutdown() -> None:
    ingestion: IngestionService | None = getattr(app.state, "ingestion", None)
    if ingestion:
        await ingestion.stop()
    latest: LatestTransactionsService | None = getattr(app.state, "latest_transactions", None)
    if latest:
        await latest.close()
    client: GatewayClient | None = getattr(app.state, "gateway_client", None)
    if client:
        await client.close()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("challenge_indexer.main:app", host="0.0.0.0", port=8000)
