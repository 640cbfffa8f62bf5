# backend/app/middleware/timing.py
"""
Request timing middleware for performance monitoring.
"""

from collections.abc import Awaitable, Callable
import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.config import settings

logger = logging.getLogger(__name__)


class TimingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log every request and measure its processing time.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        # Skip timing for health checks
        if request.url.path == "/health":
            return await call_next(request)

        start_time = time.time()

        response = await call_next(request)

        process_time = (time.time() - start_time) * 1000  # ms

        response.headers["X-Process-Time"] = f"{process_time:.2f}ms"
        logger.info(f"{request.method} {request.url.path} {response.status_code}")

        if process_time > settings.slow_request_threshold_ms:
            logger.warning(
                f"Slow request: {request.method} {request.url.path} " f"took {process_time:.2f}ms"
            )

        return response
