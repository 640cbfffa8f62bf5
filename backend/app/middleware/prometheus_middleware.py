"""
Prometheus metrics middleware for HTTP request tracking.

Feeds request duration, status codes and in-progress counts into
the prometheus_metrics module.
"""

import re
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..monitoring.prometheus_metrics import prometheus_metrics

# Primary keys are ULIDs (26 chars, Crockford base32) or integers
_ID_SEGMENT = re.compile(r"^([0-9A-HJKMNP-TV-Z]{26}|\d+)$", re.IGNORECASE)


def normalize_path(raw_path: str) -> str:
    """Collapse identifier segments so the endpoint label stays low-cardinality."""
    return "/".join(":id" if _ID_SEGMENT.match(segment) else segment for segment in raw_path.split("/"))


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Skip metrics collection for the metrics endpoint itself
        if request.url.path == "/metrics/prometheus":
            return await call_next(request)

        method = request.method
        path = normalize_path(request.url.path)

        prometheus_metrics.track_http_request_start(method, path)
        start_time = time.time()

        try:
            response = await call_next(request)
            duration = time.time() - start_time

            prometheus_metrics.record_http_request(
                method=method, endpoint=path, duration=duration, status_code=response.status_code
            )

            return response

        finally:
            prometheus_metrics.track_http_request_end(method, path)
