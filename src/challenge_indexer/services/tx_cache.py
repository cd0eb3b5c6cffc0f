"""Cache-or-fetch listing of the latest network transactions.

When caching is enabled the listing is kept in Redis for roughly one block
(six seconds) so bursts of readers cost a single gateway request. Redis
outages degrade to uncached reads instead of failing the request.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from challenge_indexer.core.settings import Settings
from challenge_indexer.services.gateway import GatewayClient

logger = logging.getLogger(__name__)


class LatestTransactionsService:
    """Serves the ``size`` most recent network transactions."""

    def __init__(
        self,
        client: GatewayClient,
        *,
        size: int = 10,
        ttl_seconds: int = 6,
        caching_enabled: bool = False,
        redis_client: redis.Redis | None = None,
    ) -> None:
        self.client = client
        self.size = size
        self.ttl_seconds = ttl_seconds
        self.caching_enabled = caching_enabled
        self._redis = redis_client

    @classmethod
    def from_settings(cls, settings: Settings, client: GatewayClient) -> LatestTransactionsService:
        redis_client = redis.from_url(settings.redis_url) if settings.caching_enabled else None
        return cls(
            client,
            size=settings.latest_transactions_size,
            ttl_seconds=settings.latest_transactions_ttl_seconds,
            caching_enabled=settings.caching_enabled,
            redis_client=redis_client,
        )

    @property
    def cache_key(self) -> str:
        return f"latest:transactions:{self.size}"

    async def get_latest(self) -> list[Any]:
        """Return the latest transactions, from cache when possible.

        Raises:
            FetchError: The gateway could not be queried on a cache miss.
        """
        if not self.caching_enabled or self._redis is None:
            return await self._fetch()

        cached = await self._read_cache()
        if cached is not None:
            return cached

        logger.info("Latest transactions cache miss; querying gateway")
        transactions = await self._fetch()
        await self._write_cache(transactions)
        return transactions

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()

    async def _fetch(self) -> list[Any]:
        transactions = await self.client.get_latest_transactions(self.size)
        logger.debug(
            "Received %d latest transactions: %s",
            len(transactions),
            [tx.get("txHash") for tx in transactions if isinstance(tx, dict)],
        )
        return transactions

    async def _read_cache(self) -> list[Any] | None:
        try:
            payload = await self._redis.get(self.cache_key)  # type: ignore[union-attr]
        except RedisError as exc:
            logger.warning("Redis read failed, serving uncached: %s", exc)
            return None
        if payload is None:
            return None
        try:
            value = json.loads(payload)
        except ValueError:
            logger.warning("Discarding corrupt cache entry %s", self.cache_key)
            return None
        return value if isinstance(value, list) else None

    async def _write_cache(self, transactions: list[Any]) -> None:
        try:
            await self._redis.set(  # type: ignore[union-attr]
                self.cache_key, json.dumps(transactions), ex=self.ttl_seconds
            )
        except RedisError as exc:
            logger.warning("Redis write failed: %s", exc)
