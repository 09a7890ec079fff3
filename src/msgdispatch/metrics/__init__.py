"""msgdispatch Prometheus metrics."""

from msgdispatch.metrics.definitions import (
    DEDUP_CACHE_ERRORS_TOTAL,
    DELIVERY_DURATION,
    DISPATCH_CYCLE_DURATION,
    DISPATCH_CYCLES_TOTAL,
    MESSAGES_PROCESSED_TOTAL,
    REQUEST_DURATION,
    REQUEST_TOTAL,
    WORKER_RUNNING,
)
from msgdispatch.metrics.middleware import MetricsMiddleware

__all__ = [
    "DEDUP_CACHE_ERRORS_TOTAL",
    "DELIVERY_DURATION",
    "DISPATCH_CYCLES_TOTAL",
    "DISPATCH_CYCLE_DURATION",
    "MESSAGES_PROCESSED_TOTAL",
    "MetricsMiddleware",
    "REQUEST_DURATION",
    "REQUEST_TOTAL",
    "WORKER_RUNNING",
]
