"""Per-request observability for the sharedrive app.

``RequestContextMiddleware`` wraps every request and:

- accepts a well-formed ``X-Request-ID`` or mints a UUID, binds it to
  ``request_id_ctx`` for the duration of the request and echoes it back;
- records ``http_server_*`` Prometheus metrics under a low-cardinality
  route label;
- writes one ``request_completed`` log line (health and metrics scrapes
  excepted).
"""

from __future__ import annotations

import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from .logging import get_logger, request_id_ctx
from .metrics import (
    HTTP_REQUEST_DURATION_SECONDS,
    HTTP_REQUESTS_IN_FLIGHT,
    HTTP_REQUESTS_TOTAL,
)

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9\-]{8,128}$")

# Routes whose trailing segment is a file path or share id.
_ROUTE_LABELS = (
    ("/share/", "/share/{share_id}"),
    ("/download/", "/download/{filepath}"),
    ("/api/read/", "/api/read/{filepath}"),
    ("/api/browse", "/api/browse/{subpath}"),
    ("/api/upload", "/api/upload/{subpath}"),
)

_UNLOGGED = frozenset({"/health", "/metrics"})


def route_label(path: str) -> str:
    """Map a concrete URL path to the route it was served by."""
    for prefix, label in _ROUTE_LABELS:
        if path.startswith(prefix):
            return label
    return path


def _request_id(request: Request) -> str:
    incoming = request.headers.get(REQUEST_ID_HEADER, "")
    if _REQUEST_ID_RE.match(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = _request_id(request)
        label = route_label(request.url.path)
        status = "500"

        token = request_id_ctx.set(rid)
        HTTP_REQUESTS_IN_FLIGHT.inc()
        started = time.perf_counter()
        try:
            response = await call_next(request)
            status = str(response.status_code)
        finally:
            elapsed = time.perf_counter() - started
            HTTP_REQUESTS_IN_FLIGHT.dec()
            HTTP_REQUEST_DURATION_SECONDS.labels(method=request.method, path=label).observe(elapsed)
            HTTP_REQUESTS_TOTAL.labels(method=request.method, path=label, status=status).inc()
            if request.url.path not in _UNLOGGED:
                logger.info(
                    "request_completed",
                    method=request.method,
                    path=request.url.path,
                    status=int(status),
                    duration_ms=round(elapsed * 1000, 2),
                )
            request_id_ctx.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
