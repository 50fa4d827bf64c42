"""Prometheus metrics for the SQLite value bridge."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all bridge metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Entry point metrics
        self.operations_total = Counter(
            "sqlite_value_operations_total",
            "Total number of bridge operations",
            ["operation", "status"],  # status: success, error
            registry=self._registry,
        )

        self.operation_latency_seconds = Histogram(
            "sqlite_value_operation_latency_seconds",
            "Bridge operation latency in seconds",
            ["operation"],
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0),
            registry=self._registry,
        )

        # Image metrics
        self.image_bytes = Histogram(
            "sqlite_value_image_bytes",
            "Size of captured images in bytes",
            ["operation"],
            buckets=(4096, 16384, 65536, 262144, 1048576, 4194304, 16777216, 67108864),
            registry=self._registry,
        )

        self.rows_returned_total = Counter(
            "sqlite_value_rows_returned_total",
            "Total rows projected out of query calls",
            registry=self._registry,
        )

        # Backup metrics
        self.backups_total = Counter(
            "sqlite_value_backups_total",
            "Total export backups",
            ["status"],  # success, failure
            registry=self._registry,
        )

        self.backup_retries_total = Counter(
            "sqlite_value_backup_retries_total",
            "Total backup steps retried because a page was locked",
            registry=self._registry,
        )

        self.info = Info(
            "sqlite_value",
            "SQLite value bridge information",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def sample(self, name: str, labels: dict[str, str] | None = None) -> float:
        """Current value of one sample, 0.0 if it has not been recorded."""
        value = self._registry.get_sample_value(name, labels or {})
        return value if value is not None else 0.0


_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    import sqlite3

    from sqlite_value import __version__
    _metrics.info.info({
        "version": __version__,
        "sqlite_version": sqlite3.sqlite_version,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
