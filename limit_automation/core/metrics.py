"""Prometheus metrics for the Limit Automation service.

Metrics are organized into two categories:

Business Metrics (for Underwriting/Risk):
- limit_automation_decision_total: Automation decisions by outcome and insurer
- limit_automation_blocker_total: Blockers raised by message
- limit_automation_renewal_total: Renewal requests by outcome

Technical Metrics (for Engineering/SRE):
- limit_automation_decision_latency_seconds: Decisioning run latency
- limit_automation_policy_lookup_latency_seconds: Policy lookup latency
- limit_automation_classifier_failures_total: Entity classifier failures
- limit_automation_run_retry_total: Background run retries
- limit_automation_run_failures_total: Background runs that exhausted retries
- limit_automation_push_total: Notification push deliveries
- limit_automation_http_requests_total: HTTP requests by endpoint/status
"""

import time
from contextlib import contextmanager
from typing import Generator, Iterable

from prometheus_client import Counter, Histogram, Gauge, REGISTRY, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST


# =============================================================================
# Business Metrics
# =============================================================================

decision_total = Counter(
    "limit_automation_decision_total",
    "Total number of automation decisions",
    ["outcome", "insurer"],  # approved, review
)

blocker_total = Counter(
    "limit_automation_blocker_total",
    "Blockers raised by the eligibility gate",
    ["blocker"],
)

renewal_total = Counter(
    "limit_automation_renewal_total",
    "Renewal requests by outcome",
    ["outcome"],  # submitted, skipped
)


# =============================================================================
# Technical Metrics
# =============================================================================

decision_latency = Histogram(
    "limit_automation_decision_latency_seconds",
    "Decisioning run latency in seconds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

policy_lookup_latency = Histogram(
    "limit_automation_policy_lookup_latency_seconds",
    "Policy lookup latency in seconds",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

classifier_failures = Counter(
    "limit_automation_classifier_failures_total",
    "Total number of entity classifier failures",
    ["error_type"],  # timeout, error
)

run_retries = Counter(
    "limit_automation_run_retry_total",
    "Total number of background decisioning retries",
)

run_failures = Counter(
    "limit_automation_run_failures_total",
    "Background decisioning runs that exhausted all attempts",
)

runs_in_flight = Gauge(
    "limit_automation_runs_in_flight",
    "Background decisioning runs currently queued or running",
)

push_total = Counter(
    "limit_automation_push_total",
    "Notification push deliveries",
    ["status"],  # success, failure
)

http_requests_total = Counter(
    "limit_automation_http_requests_total",
    "Total HTTP requests by endpoint and status",
    ["method", "endpoint", "status"],
)

http_request_latency = Histogram(
    "limit_automation_http_request_latency_seconds",
    "HTTP request latency by endpoint",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_decision(approved: bool, insurer: str, blockers: Iterable[str]) -> None:
    """Record an automation decision and the blockers behind it."""
    outcome = "approved" if approved else "review"
    decision_total.labels(outcome=outcome, insurer=insurer or "unresolved").inc()
    for blocker in blockers:
        blocker_total.labels(blocker=blocker).inc()


def record_renewal(submitted: bool) -> None:
    renewal_total.labels(outcome="submitted" if submitted else "skipped").inc()


@contextmanager
def track_decision_latency() -> Generator[None, None, None]:
    """Context manager to track decisioning latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        decision_latency.observe(time.perf_counter() - start)


@contextmanager
def track_policy_lookup_latency() -> Generator[None, None, None]:
    """Context manager to track policy lookup latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        policy_lookup_latency.observe(time.perf_counter() - start)


def record_classifier_failure(error_type: str) -> None:
    classifier_failures.labels(error_type=error_type).inc()


def record_run_retry() -> None:
    run_retries.inc()


def record_run_failure() -> None:
    run_failures.inc()


def record_run_started() -> None:
    runs_in_flight.inc()


def record_run_finished() -> None:
    runs_in_flight.dec()


def record_push(success: bool) -> None:
    push_total.labels(status="success" if success else "failure").inc()


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
