"""
Gatherly Backend — Access Log Middleware
==========================================

One line per request on the "gatherly.access" logger:

    POST /api/photos 200 812.4ms from 10.0.0.7

Level follows the outcome: 5xx → ERROR, 4xx → WARNING, otherwise INFO.
The request ID is added by RequestIDLogFilter, not repeated here. Bodies
and Authorization headers are never logged. /health is skipped.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("gatherly.access")

QUIET_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log with status-dependent level and duration."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                "%s %s raised after %.1fms from %s",
                request.method, path, (time.perf_counter() - started) * 1000, client_ip,
            )
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        logger.log(
            level_for_status(response.status_code),
            "%s %s %d %.1fms from %s",
            request.method,
            path,
            response.status_code,
            duration_ms,
            client_ip,
            extra={"status": response.status_code, "duration_ms": round(duration_ms, 2)},
        )
        return response
