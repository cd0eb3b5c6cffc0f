"""Application settings and configuration.

This module defines all configuration options for the challenge indexer.
Settings are loaded from environment variables (and an optional ``.env`` file)
with sensible defaults; only the watched contract address is mandatory.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from challenge_indexer.core.errors import ConfigError

DEFAULT_GATEWAY_API_URL = "https://api.multiversx.com"


class Settings(BaseSettings):
    """Indexer settings loaded from environment variables.

    Values can be overridden via environment variables or a ``.env`` file at
    the working directory.
    """

    # Application metadata
    app_name: str = Field(default="Challenge Indexer", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Watched contract and gateway
    challenge_contract_address: str = Field(alias="CHALLENGE_CONTRACT_ADDRESS")
    gateway_api_url: str = Field(default=DEFAULT_GATEWAY_API_URL, alias="GATEWAY_API_URL")
    gateway_http_timeout_seconds: float = Field(
        default=10.0,
        alias="GATEWAY_HTTP_TIMEOUT_SECONDS",
    )

    # Ingestion loop
    ingestion_enabled: bool = Field(default=True, alias="INGESTION_ENABLED")
    tx_fetch_size: int = Field(default=25, ge=1, alias="TX_FETCH_SIZE")
    tx_poll_interval_ms: int = Field(default=30_000, alias="TX_POLL_INTERVAL_MS")
    dedup_window_size: int = Field(default=500, ge=1, alias="DEDUP_WINDOW_SIZE")

    # Database configuration
    database_url: str = Field(default="sqlite:///./challenges.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Latest-transactions listing and its cache
    caching_enabled: bool = Field(default=False, alias="CACHING_ENABLED")
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")
    latest_transactions_size: int = Field(default=10, ge=1, alias="LATEST_TRANSACTIONS_SIZE")
    latest_transactions_ttl_seconds: int = Field(
        default=6,
        ge=1,
        alias="LATEST_TRANSACTIONS_TTL_SECONDS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @field_validator("challenge_contract_address")
    @classmethod
    def _require_contract_address(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("CHALLENGE_CONTRACT_ADDRESS must not be blank")
        return value

    @field_validator("gateway_api_url")
    @classmethod
    def _normalize_gateway_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        return value or DEFAULT_GATEWAY_API_URL

    @property
    def poll_interval_seconds(self) -> float:
        """Return the polling interval in seconds; ``0`` means one-shot mode."""
        return max(0, self.tx_poll_interval_ms) / 1000.0


def load_settings(**overrides: object) -> Settings:
    """Build a :class:`Settings` instance, raising :class:`ConfigError` on failure.

    Args:
        **overrides: Values keyed by environment variable name, taking
            precedence over the environment.
    """
    try:
        return Settings(**overrides)  # type: ignore[arg-type]
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    return load_settings()
