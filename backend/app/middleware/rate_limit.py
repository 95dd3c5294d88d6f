"""
Gatherly Backend — Rate Limiting Middleware
=============================================

What:  Per-client sliding-window limit of settings.rate_limit_requests
       requests per settings.rate_limit_window seconds.
How:   A deque of request timestamps per client IP; timestamps older than
       the window are popped from the left before each check.

Rejections are rendered from RateLimitExceededError in the same JSON shape
the exception handlers use. BaseHTTPMiddleware runs outside FastAPI's
exception handling, so raising here would become a 500.

State is per process. Behind several workers each worker counts on its own.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Callable, Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from app.config import settings
from app.exceptions import RateLimitExceededError
from app.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

EXEMPT_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


class SlidingWindowCounter:
    """Request timestamps per key over a fixed-length window."""

    def __init__(self, limit: int, window: int, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window = window
        self.clock = clock
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)

    def hit(self, key: str) -> Optional[int]:
        """
        Record a request for key.

        Returns None if allowed, else the seconds until the oldest request in
        the window expires (the Retry-After value). Rejected requests are
        not recorded.
        """
        now = self.clock()
        hits = self._hits[key]
        while hits and hits[0] <= now - self.window:
            hits.popleft()

        if len(hits) >= self.limit:
            return int(hits[0] + self.window - now) + 1

        hits.append(now)
        return None

    def prune(self) -> int:
        """Drop keys with no requests inside the window; returns how many."""
        cutoff = self.clock() - self.window
        idle = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in idle:
            del self._hits[key]
        return len(idle)

    def __len__(self) -> int:
        return len(self._hits)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rejects clients over the limit with 429 and Retry-After."""

    PRUNE_EVERY = 1000

    def __init__(self, app: ASGIApp, limit: Optional[int] = None, window: Optional[int] = None):
        super().__init__(app)
        self.counter = SlidingWindowCounter(
            limit=limit or settings.rate_limit_requests,
            window=window or settings.rate_limit_window,
        )
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        retry_after = self.counter.hit(client_ip)

        self._seen += 1
        if self._seen % self.PRUNE_EVERY == 0:
            pruned = self.counter.prune()
            if pruned:
                logger.debug("Pruned %d idle rate-limit entries", pruned)

        if retry_after is not None:
            exc = RateLimitExceededError(retry_after=retry_after)
            logger.warning("Rate limit exceeded for %s on %s", client_ip, request.url.path)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": {"retry_after": retry_after},
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        return await call_next(request)
