"""Prometheus metrics definitions for msgdispatch."""

from prometheus_client import Counter, Gauge, Histogram

# HTTP Request metrics
REQUEST_TOTAL = Counter(
    "msgdispatch_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "msgdispatch_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Dispatch cycle metrics
DISPATCH_CYCLES_TOTAL = Counter(
    "msgdispatch_dispatch_cycles_total",
    "Total dispatch cycles",
    ["result"],  # completed, empty, fetch_error, timeout
)

DISPATCH_CYCLE_DURATION = Histogram(
    "msgdispatch_dispatch_cycle_duration_seconds",
    "Dispatch cycle duration in seconds",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

MESSAGES_PROCESSED_TOTAL = Counter(
    "msgdispatch_messages_processed_total",
    "Messages processed by the dispatch worker",
    ["outcome"],  # sent, failed, invalid, unrecorded
)

DELIVERY_DURATION = Histogram(
    "msgdispatch_delivery_duration_seconds",
    "Delivery webhook call duration in seconds",
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

DEDUP_CACHE_ERRORS_TOTAL = Counter(
    "msgdispatch_dedup_cache_errors_total",
    "Failed writes to the dedup cache",
)

WORKER_RUNNING = Gauge(
    "msgdispatch_worker_running",
    "1 while the dispatch worker is scheduled, 0 otherwise",
)
