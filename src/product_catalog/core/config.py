"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from .enums import PublisherBackend, StorageBackend


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class DatabaseConfig(BaseModel):
    url: str | None = None  # None → in-memory repository
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    create_tables: bool = True


class BrokerConfig(BaseModel):
    redis_url: str | None = None  # None → no-op publisher
    exchange: str = "product.events"
    max_stream_length: int | None = None  # None keeps every entry


class PaginationConfig(BaseModel):
    default_page_size: int = Field(default=10, ge=1)
    max_page_size: int = Field(default=100, ge=1)


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level application settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    service_name: str = "product-catalog"

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    broker: BrokerConfig = Field(default_factory=BrokerConfig)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "CATALOG_", "env_nested_delimiter": "__"}

    @property
    def storage_backend(self) -> StorageBackend:
        if self.database.url:
            return StorageBackend.SQLALCHEMY
        return StorageBackend.MEMORY

    @property
    def publisher_backend(self) -> PublisherBackend:
        if self.broker.redis_url:
            return PublisherBackend.REDIS_STREAMS
        return PublisherBackend.NOOP

    def validate_consistency(self) -> None:
        """Reject combinations that individual fields cannot catch."""
        from .errors import ConfigError

        if self.pagination.default_page_size > self.pagination.max_page_size:
            raise ConfigError(
                "pagination.default_page_size "
                f"({self.pagination.default_page_size}) exceeds "
                f"pagination.max_page_size ({self.pagination.max_page_size})"
            )
        if self.observability.log_format not in ("json", "console"):
            raise ConfigError(
                f"Unknown log format {self.observability.log_format!r}; "
                "expected 'json' or 'console'"
            )


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            with open(path, "rb") as f:
                data = tomli.load(f)

    if overrides:
        data.update(overrides)

    return Settings(**data)
