"""
Request Logging Middleware

Logs method, path, status code and latency for every request.
Enabled in DEBUG mode.
"""

import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

# Paths that skip logging (health checks, docs)
SKIP_LOGGING_PATHS = {"/", "/health", "/docs", "/redoc"}


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per handled request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if path in SKIP_LOGGING_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.error(f"{request.method} {path} failed after {duration_ms:.1f}ms")
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {path} -> {response.status_code} ({duration_ms:.1f}ms)"
        )
        return response
