"""Gateway client and contract transaction fetcher.

This module provides the GatewayClient class that handles all communication
with the MultiversX API gateway, and the TransactionFetcher that turns the
watched contract's recent history into an ordered, normalized batch. It
includes:

- HTTP client with lazy initialisation and per-endpoint metrics
- Error translation into :class:`FetchError`
- Receiver filtering and chronological ordering for the projector
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import defaultdict
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from challenge_indexer.core.errors import FetchError
from challenge_indexer.core.settings import Settings, get_settings
from challenge_indexer.services.normalizer import NormalizedTransaction, normalize_transactions

# Configure logger for this module
logger = logging.getLogger(__name__)

HTTP_BAD_REQUEST = 400
# Upstream bodies can be large HTML error pages; keep the interesting part.
MAX_ERROR_BODY_CHARS = 2_000


@dataclass
class GatewayMetrics:
    """Request counters and latencies per gateway endpoint, exposed on /system/status."""

    request_count: int = 0
    success_count: int = 0
    error_count: int = 0
    total_response_time: float = 0.0
    max_response_time: float = 0.0
    error_counts_by_type: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    endpoint_counts: dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def record_request(
        self, endpoint: str, response_time: float, success: bool, error_type: str | None = None
    ) -> None:
        """Record one completed or failed gateway call."""
        self.request_count += 1
        self.total_response_time += response_time
        self.max_response_time = max(self.max_response_time, response_time)
        self.endpoint_counts[endpoint] += 1

        if success:
            self.success_count += 1
        else:
            self.error_count += 1
            if error_type:
                self.error_counts_by_type[error_type] += 1

    def get_average_response_time(self) -> float:
        """Mean latency in seconds over all recorded calls."""
        return self.total_response_time / self.request_count if self.request_count > 0 else 0.0

    def as_dict(self) -> dict[str, Any]:
        return {
            "request_count": self.request_count,
            "success_count": self.success_count,
            "error_count": self.error_count,
            "average_response_time": self.get_average_response_time(),
            "max_response_time": self.max_response_time,
            "error_counts_by_type": dict(self.error_counts_by_type),
            "endpoint_counts": dict(self.endpoint_counts),
        }


@dataclass(frozen=True)
class GatewayConfig:
    """Immutable configuration for gateway operations."""

    base_url: str
    timeout_seconds: float


def load_gateway_config(settings: Settings | None = None) -> GatewayConfig:
    """Build configuration object from settings."""
    settings = settings or get_settings()
    return GatewayConfig(
        base_url=settings.gateway_api_url,
        timeout_seconds=float(settings.gateway_http_timeout_seconds),
    )


class GatewayClient:
    """HTTP client wrapper for the MultiversX API gateway."""

    def __init__(
        self,
        config: GatewayConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_gateway_config()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()
        self.metrics = GatewayMetrics()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.config.base_url,
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    headers={"Accept": "application/json"},
                    transport=self._transport,
                )
        return self._client

    async def close(self) -> None:
        """Close the pooled connection; the next request reopens it."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None

    async def _get_json_list(self, path: str, params: Mapping[str, Any]) -> list[Any]:
        client = await self._ensure_client()
        endpoint = f"GET {path}"
        start_time = time.monotonic()
        success = False
        error_type: str | None = None

        try:
            response = await client.get(path, params=dict(params))
        except httpx.HTTPError as exc:
            error_type = "network_error"
            raise FetchError(f"Gateway request failed: {exc}", body=str(exc)) from exc
        else:
            if response.status_code >= HTTP_BAD_REQUEST:
                error_type = f"http_{response.status_code}"
                raise FetchError(
                    f"Gateway responded with {response.status_code} for {path}",
                    status_code=response.status_code,
                    body=response.text[:MAX_ERROR_BODY_CHARS],
                )
            try:
                payload = response.json()
            except ValueError as exc:
                error_type = "invalid_json"
                raise FetchError(
                    f"Gateway returned invalid JSON for {path}",
                    status_code=response.status_code,
                    body=response.text[:MAX_ERROR_BODY_CHARS],
                ) from exc
            if not isinstance(payload, list):
                error_type = "unexpected_payload"
                raise FetchError(
                    f"Gateway returned {type(payload).__name__} instead of a list for {path}",
                    status_code=response.status_code,
                    body=response.text[:MAX_ERROR_BODY_CHARS],
                )
            success = True
            return payload
        finally:
            self.metrics.record_request(
                endpoint, time.monotonic() - start_time, success, error_type
            )

    async def get_account_transactions(self, address: str, size: int) -> list[Any]:
        """Return the ``size`` most recent transactions of ``address``, newest first."""
        return await self._get_json_list(
            f"/accounts/{address}/transactions",
            {"size": size, "order": "desc", "withScResults": "true"},
        )

    async def get_latest_transactions(self, size: int) -> list[Any]:
        """Return the ``size`` most recent transactions on the network, newest first."""
        return await self._get_json_list("/transactions", {"size": size, "order": "desc"})


class TransactionFetcher:
    """Fetches the watched contract's recent calls in chronological order."""

    def __init__(self, client: GatewayClient, contract_address: str, batch_size: int = 25) -> None:
        self.client = client
        self.contract_address = contract_address
        self.batch_size = batch_size

    async def fetch(self) -> list[NormalizedTransaction]:
        """Fetch, normalize, filter and sort one batch.

        Raises:
            FetchError: The gateway could not be queried. Not retried here.
        """
        records = await self.client.get_account_transactions(
            self.contract_address, self.batch_size
        )
        watched = self.contract_address.lower()
        transactions = [
            tx
            for tx in normalize_transactions(records)
            if tx.receiver is not None and tx.receiver.lower() == watched
        ]
        # The gateway answers newest-first; effects must be applied oldest-first.
        transactions.sort(key=lambda tx: tx.sort_key)
        logger.debug(
            "Fetched %d records, %d addressed to %s",
            len(records),
            len(transactions),
            self.contract_address,
        )
        return transactions
