"""Per-operation observability: one span, one latency sample, one outcome."""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Generator

from sqlite_value.infrastructure.logging import get_logger
from sqlite_value.infrastructure.metrics import MetricsRegistry
from sqlite_value.infrastructure.tracing import trace_span

logger = get_logger(__name__)


@dataclass
class OperationOutcome:
    """Status recorded for a call that returns normally.

    Operations that report failure through their return value rather than
    an exception set `status` before returning.
    """

    status: str = "success"

    def fail(self) -> None:
        self.status = "failure"


@contextmanager
def observe_operation(
    metrics: MetricsRegistry,
    operation: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[OperationOutcome, None, None]:
    """Trace, time and count one entry-point call.

    Exceptions propagate unchanged; the span records them and they are
    counted as errors and logged. A normal return is counted under the
    yielded outcome's status.
    """
    outcome = OperationOutcome()
    start = time.perf_counter()
    with trace_span(f"sqlite_value.{operation}", attributes):
        try:
            yield outcome
        except Exception as e:
            metrics.operations_total.labels(operation=operation, status="error").inc()
            logger.warning(
                "operation_failed",
                operation=operation,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise
        else:
            metrics.operations_total.labels(
                operation=operation, status=outcome.status
            ).inc()
        finally:
            metrics.operation_latency_seconds.labels(operation=operation).observe(
                time.perf_counter() - start
            )
