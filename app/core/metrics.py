"""Prometheus metrics for monitoring report bot operations."""

from contextlib import contextmanager
from time import time
from typing import Generator

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import APIRouter, Response


# =============================================================================
# Counters
# =============================================================================

reports_generated = Counter(
    "auroscope_reports_generated_total",
    "Total reports generated",
    ["period", "trigger"],  # trigger: command, schedule, api
)

filter_fallbacks = Counter(
    "auroscope_filter_fallbacks_total",
    "Server-side filtered fetches that fell back to a full fetch",
)

scheduled_deliveries = Counter(
    "auroscope_scheduled_deliveries_total",
    "Scheduled report deliveries per recipient",
    ["status"],  # sent, failed
)


# =============================================================================
# Histograms
# =============================================================================

report_generation_time = Histogram(
    "auroscope_report_generation_seconds",
    "Report generation duration",
    ["period"],
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0),
)

nocodb_latency = Histogram(
    "auroscope_nocodb_latency_seconds",
    "NocoDB API response time",
    ["operation"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)


# =============================================================================
# Helper Functions
# =============================================================================

def track_report_generation(period: str, trigger: str) -> None:
    """
    Increment the reports generated counter.

    Args:
        period: Period keyword (e.g., 'today', 'week')
        trigger: What requested the report ('command', 'schedule', 'api')
    """
    reports_generated.labels(period=period, trigger=trigger).inc()


def track_filter_fallback() -> None:
    """Count one fallback from filtered to unfiltered fetching."""
    filter_fallbacks.inc()


def track_scheduled_delivery(status: str) -> None:
    scheduled_deliveries.labels(status=status).inc()


@contextmanager
def track_report_generation_time(period: str) -> Generator[None, None, None]:
    """
    Context manager to track report generation duration.

    Example:
        with track_report_generation_time("week"):
            # Generate report
            pass
    """
    start_time = time()
    try:
        yield
    finally:
        duration = time() - start_time
        report_generation_time.labels(period=period).observe(duration)


@contextmanager
def track_nocodb_latency(operation: str) -> Generator[None, None, None]:
    """
    Context manager to track NocoDB API latency.

    Args:
        operation: API operation name (e.g., 'list_records', 'list_clubs')
    """
    start_time = time()
    try:
        yield
    finally:
        duration = time() - start_time
        nocodb_latency.labels(operation=operation).observe(duration)


# =============================================================================
# FastAPI Endpoint
# =============================================================================

metrics_router = APIRouter()


@metrics_router.get("/metrics")
def get_metrics() -> Response:
    """Expose Prometheus metrics in text format."""
    metrics_data = generate_latest()
    return Response(content=metrics_data, media_type=CONTENT_TYPE_LATEST)
