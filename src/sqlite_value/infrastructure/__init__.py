"""Infrastructure layer - cross-cutting concerns."""

from sqlite_value.infrastructure.config import Config, get_config
from sqlite_value.infrastructure.logging import setup_logging, get_logger
from sqlite_value.infrastructure.metrics import setup_metrics, get_metrics, MetricsRegistry
from sqlite_value.infrastructure.tracing import setup_tracing, get_tracer

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
]
