"""Dependency injection container for the SQLite value bridge."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import structlog
from opentelemetry import trace

from sqlite_value.adapters.outbound import create_bridge
from sqlite_value.application import BackupPolicy, DurabilityCopier, ExecutionAdapter
from sqlite_value.infrastructure.config import Config, get_config
from sqlite_value.infrastructure.logging import get_logger, setup_logging
from sqlite_value.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from sqlite_value.infrastructure.tracing import setup_tracing
from sqlite_value.ports.outbound import ImageBridge


@dataclass
class Container:
    """Dependency injection container for bridge components."""

    config: Config
    logger: structlog.BoundLogger
    tracer: trace.Tracer
    metrics: MetricsRegistry
    bridge: ImageBridge
    adapter: ExecutionAdapter
    copier: DurabilityCopier

    _instance: ClassVar[Container | None] = None

    @classmethod
    def build(cls, config: Config, metrics: MetricsRegistry | None = None) -> Container:
        """Wire components for `config` without touching the singleton."""
        metrics = metrics or get_metrics()
        bridge = create_bridge(config.bridge)
        return cls(
            config=config,
            logger=get_logger("sqlite_value"),
            tracer=trace.get_tracer("sqlite_value"),
            metrics=metrics,
            bridge=bridge,
            adapter=ExecutionAdapter(bridge, metrics=metrics),
            copier=DurabilityCopier(
                bridge,
                policy=BackupPolicy.from_config(config.backup),
                metrics=metrics,
            ),
        )

    @classmethod
    def create(cls) -> Container:
        """Create and initialize the container with all dependencies."""
        if cls._instance is not None:
            return cls._instance

        config = get_config()
        setup_logging(
            level=config.observability.log_level,
            log_format=config.observability.log_format,
        )
        tracer = setup_tracing(
            service_name=config.observability.otel_service_name,
            otlp_endpoint=config.observability.otel_endpoint,
            console_export=config.observability.trace_console,
        )
        if config.observability.metrics_enabled:
            metrics = setup_metrics(port=config.observability.metrics_port)
        else:
            metrics = get_metrics()

        container = cls.build(config, metrics=metrics)
        container.tracer = tracer
        cls._instance = container

        container.logger.info(
            "sqlite_value_container_initialized",
            strategy=container.bridge.name,
            pages_per_step=config.backup.pages_per_step,
            max_retries=config.backup.max_retries,
            metrics_enabled=config.observability.metrics_enabled,
        )

        return container

    @classmethod
    def get(cls) -> Container:
        """Get the singleton container instance."""
        if cls._instance is None:
            return cls.create()
        return cls._instance

    @classmethod
    def install(cls, container: Container) -> None:
        """Make `container` the singleton (useful for testing)."""
        cls._instance = container

    @classmethod
    def reset(cls) -> None:
        """Reset the container (useful for testing)."""
        cls._instance = None


def get_container() -> Container:
    """Get the dependency injection container."""
    return Container.get()
