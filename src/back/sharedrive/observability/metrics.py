"""Prometheus metrics exposed at ``/metrics``.

HTTP metrics are recorded by ``RequestContextMiddleware``; the share and
upload counters are bumped by the services that own those operations.
"""

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, Counter, Gauge, Histogram, generate_latest

HTTP_REQUESTS_TOTAL = Counter(
    "http_server_requests_total",
    "HTTP requests by method, route and status code.",
    labelnames=["method", "path", "status"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_server_request_duration_seconds",
    "HTTP request latency in seconds, including streamed file bodies.",
    labelnames=["method", "path"],
    buckets=(0.005, 0.025, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 15.0, 60.0),
)

HTTP_REQUESTS_IN_FLIGHT = Gauge(
    "http_server_requests_in_flight",
    "HTTP requests currently being processed.",
)

SHARE_LINKS_CREATED = Counter(
    "sharedrive_share_links_created_total",
    "Share links handed out.",
)

SHARE_LINKS_SERVED = Counter(
    "sharedrive_share_links_served_total",
    "Shared files streamed to a client.",
)

# reason: expired | swept | revoked | invalid_path | target_missing | target_not_file
SHARE_LINKS_REMOVED = Counter(
    "sharedrive_share_links_removed_total",
    "Share links dropped from the registry.",
    labelnames=["reason"],
)

UPLOADS_TOTAL = Counter(
    "sharedrive_uploads_total",
    "Upload attempts by outcome (stored | failed).",
    labelnames=["outcome"],
)

UPLOAD_BYTES_TOTAL = Counter(
    "sharedrive_upload_bytes_total",
    "Bytes written by stored uploads.",
)


def metrics_text() -> tuple[bytes, str]:
    """Return the exposition body and its content type."""
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
