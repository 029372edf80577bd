"""
Prometheus metrics for Fleet Service.

Tracks HTTP traffic, list queries, report generation and writes.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Request metrics
http_requests_total = Counter(
    "fleet_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "fleet_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0),
)

# Query metrics
fleet_list_queries_total = Counter(
    "fleet_list_queries_total",
    "Total paginated list queries",
    ["entity", "status"],
)

fleet_list_page_size = Histogram(
    "fleet_list_page_size",
    "Number of rows returned per list page",
    ["entity"],
    buckets=(0, 1, 5, 10, 20, 50, 100),
)

# Report metrics
fleet_reports_total = Counter(
    "fleet_reports_total",
    "Total report generations",
    ["report", "status"],
)

fleet_report_duration_seconds = Histogram(
    "fleet_report_duration_seconds",
    "Report generation duration in seconds",
    ["report"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

# Write metrics
fleet_writes_total = Counter(
    "fleet_writes_total",
    "Total write operations",
    ["operation", "status"],
)


def _status(success: bool) -> str:
    return "success" if success else "failure"


def track_request_metrics(method: str, endpoint: str, status_code: int, duration: float):
    """Track HTTP request metrics."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=status_code).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)


def track_list_query(entity: str, success: bool, rows: int = 0):
    """Track list query outcome and page size."""
    fleet_list_queries_total.labels(entity=entity, status=_status(success)).inc()
    if success:
        fleet_list_page_size.labels(entity=entity).observe(rows)


def track_report(report: str, success: bool, duration: float):
    """Track report generation."""
    fleet_reports_total.labels(report=report, status=_status(success)).inc()
    fleet_report_duration_seconds.labels(report=report).observe(duration)


def track_write(operation: str, success: bool):
    """Track write operations."""
    fleet_writes_total.labels(operation=operation, status=_status(success)).inc()


async def metrics_endpoint():
    """
    Prometheus metrics endpoint.

    Returns:
        Response with Prometheus metrics in text format
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
