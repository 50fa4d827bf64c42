"""Configuration management for the SQLite value bridge."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BridgeConfig(BaseModel):
    """Ownership bridge configuration."""

    strategy: Literal["memory", "tempfile"] = Field(
        default="memory",
        description="How images are materialized: in-memory deserialize or a temporary file",
    )
    temp_dir: Path | None = Field(
        default=None,
        description="Directory for temp-file handles (system temp dir if unset)",
    )


class BackupConfig(BaseModel):
    """Durability copier configuration."""

    pages_per_step: int = Field(default=5, ge=1, description="Pages copied per backup step")
    retry_sleep_seconds: float = Field(
        default=0.25, gt=0, le=10, description="Sleep between retries of a locked step"
    )
    max_retries: int = Field(
        default=40, ge=0, description="Locked steps retried before the backup gives up"
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="sqlite_value", description="Service name for tracing")
    metrics_port: int = Field(default=8001, ge=1, le=65535, description="Prometheus metrics port")
    metrics_enabled: bool = Field(
        default=False, description="Serve Prometheus metrics on metrics_port"
    )
    trace_console: bool = Field(default=False, description="Also print spans to the console")


class Config(BaseSettings):
    """Main configuration for the SQLite value bridge."""

    model_config = SettingsConfigDict(
        env_prefix="SQLITE_VALUE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    bridge: BridgeConfig = Field(default_factory=BridgeConfig)
    backup: BackupConfig = Field(default_factory=BackupConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    def ensure_directories(self) -> None:
        """Ensure the temp-file directory exists when one is configured."""
        if self.bridge.temp_dir is not None:
            self.bridge.temp_dir.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    config = Config()
    config.ensure_directories()
    return config
