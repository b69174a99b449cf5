# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
HTTP Middleware: request ID propagation and Prometheus metrics.
"""

import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from membership.metrics.prometheus import REQUEST_COUNT, REQUEST_LATENCY, HTTP_ERRORS

# probes and scrapes would drown the business traffic
UNTRACKED_ROUTES: set[str] = {"/health", "/health/ready", "/metrics"}


def route_template(request: Request) -> str:
    """Path template of the matched route (e.g. /events/{event_id}/register)."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propagate or generate X-Request-ID for tracing."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Count requests and errors per route template, and time them."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        endpoint = route_template(request)
        if endpoint in UNTRACKED_ROUTES:
            return response

        status = str(response.status_code)
        REQUEST_COUNT.labels(method=request.method, endpoint=endpoint, status=status).inc()
        REQUEST_LATENCY.labels(method=request.method, endpoint=endpoint).observe(
            time.perf_counter() - start
        )
        if response.status_code >= 400:
            HTTP_ERRORS.labels(method=request.method, endpoint=endpoint, status=status).inc()
        return response
