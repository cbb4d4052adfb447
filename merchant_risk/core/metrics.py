"""Prometheus metrics for the Merchant Risk Engine.

Metrics are organized into two categories:

Business Metrics (for Risk/Finance):
- merchant_risk_recommendations_total: Recommendations by tier
- merchant_risk_reserve_recommended_total: Recommendations by reserve type and band
- merchant_risk_partial_recommendations_total: Records scored with unknown inputs
- merchant_risk_batch_runs_total: Completed batch runs
- merchant_risk_last_batch_failed_entities: Failures in the most recent batch

Technical Metrics (for Engineering/SRE):
- merchant_risk_scoring_latency_seconds: Single-merchant pipeline latency
- merchant_risk_batch_duration_seconds: Whole batch run latency
- merchant_risk_entity_failures_total: Per-merchant failures by error code
- merchant_risk_signal_fetch_latency_seconds: Signal Store latency
- merchant_risk_signal_fetch_total / _failures_total: Signal Store outcomes
- merchant_risk_case_webhook_*: Case webhook deliveries and retries
- merchant_risk_http_requests_total: HTTP requests by endpoint/status
"""

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import Counter, Histogram, Gauge, REGISTRY, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST


# =============================================================================
# Business Metrics (Risk/Finance dashboards)
# =============================================================================

recommendations_total = Counter(
    "merchant_risk_recommendations_total",
    "Total number of reserve recommendations produced",
    ["tier"],  # low, medium, high, very_high
)

reserve_recommended_total = Counter(
    "merchant_risk_reserve_recommended_total",
    "Recommendations by reserve type and band",
    ["reserve_type", "band"],
)

partial_recommendations_total = Counter(
    "merchant_risk_partial_recommendations_total",
    "Recommendations produced with unknown inputs scored as 0",
)

batch_runs_total = Counter(
    "merchant_risk_batch_runs_total",
    "Total number of completed batch runs",
)

last_batch_failed_gauge = Gauge(
    "merchant_risk_last_batch_failed_entities",
    "Merchants that failed in the most recent batch run",
)


# =============================================================================
# Technical Metrics (Engineering/SRE dashboards)
# =============================================================================

scoring_latency = Histogram(
    "merchant_risk_scoring_latency_seconds",
    "Single-merchant fetch-and-score latency in seconds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

batch_duration = Histogram(
    "merchant_risk_batch_duration_seconds",
    "Batch run duration in seconds",
    buckets=[1.0, 5.0, 15.0, 60.0, 300.0, 900.0, 3600.0],
)

entity_failures = Counter(
    "merchant_risk_entity_failures_total",
    "Merchants that could not be scored",
    ["error_code"],
)

signal_fetch_latency = Histogram(
    "merchant_risk_signal_fetch_latency_seconds",
    "Signal Store fetch latency in seconds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

signal_fetch_failures = Counter(
    "merchant_risk_signal_fetch_failures_total",
    "Total number of Signal Store failures",
    ["error_type"],  # timeout, error, not_found
)

signal_fetch_total = Counter(
    "merchant_risk_signal_fetch_total",
    "Total number of Signal Store requests",
    ["status"],  # success, failure
)

case_webhook_latency = Histogram(
    "merchant_risk_case_webhook_latency_seconds",
    "Case webhook delivery latency in seconds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

case_webhook_retries = Counter(
    "merchant_risk_case_webhook_retry_total",
    "Total number of case webhook retries",
)

case_webhook_failures = Counter(
    "merchant_risk_case_webhook_failures_total",
    "Total number of case webhook delivery failures (after all retries)",
)

case_webhook_success = Counter(
    "merchant_risk_case_webhook_success_total",
    "Total number of successful case webhook deliveries",
)

http_requests_total = Counter(
    "merchant_risk_http_requests_total",
    "Total HTTP requests by endpoint and status",
    ["method", "endpoint", "status"],
)

http_request_latency = Histogram(
    "merchant_risk_http_request_latency_seconds",
    "HTTP request latency by endpoint",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_recommendation(tier: str, reserve_type: str, band: str, partial: bool) -> None:
    """Record a produced recommendation in metrics."""
    recommendations_total.labels(tier=tier).inc()
    reserve_recommended_total.labels(reserve_type=reserve_type, band=band).inc()
    if partial:
        partial_recommendations_total.inc()


def record_entity_failure(error_code: str) -> None:
    """Record a merchant that could not be scored."""
    entity_failures.labels(error_code=error_code).inc()


def record_batch_run(duration_seconds: float, failed: int) -> None:
    """Record a completed batch run."""
    batch_runs_total.inc()
    batch_duration.observe(duration_seconds)
    last_batch_failed_gauge.set(failed)


@contextmanager
def track_scoring_latency() -> Generator[None, None, None]:
    """Context manager to track single-merchant scoring latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        scoring_latency.observe(duration)


@contextmanager
def track_case_webhook_latency() -> Generator[None, None, None]:
    """Context manager to track case webhook latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        case_webhook_latency.observe(duration)


@contextmanager
def track_signal_fetch_latency() -> Generator[None, None, None]:
    """Context manager to track Signal Store fetch latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        signal_fetch_latency.observe(duration)


def record_signal_fetch_success() -> None:
    """Record a successful Signal Store fetch."""
    signal_fetch_total.labels(status="success").inc()


def record_signal_fetch_failure(error_type: str) -> None:
    """Record a Signal Store fetch failure."""
    signal_fetch_total.labels(status="failure").inc()
    signal_fetch_failures.labels(error_type=error_type).inc()


def record_case_webhook_retry() -> None:
    """Record a case webhook retry attempt."""
    case_webhook_retries.inc()


def record_case_webhook_success() -> None:
    """Record a successful case webhook delivery."""
    case_webhook_success.inc()


def record_case_webhook_failure() -> None:
    """Record a failed case webhook delivery (after all retries)."""
    case_webhook_failures.inc()


def record_http_request(method: str, endpoint: str, status: int, duration: float) -> None:
    """Record an HTTP request."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=str(status)).inc()
    http_request_latency.labels(method=method, endpoint=endpoint).observe(duration)


def get_metrics() -> bytes:
    """Get current metrics in Prometheus format."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST
