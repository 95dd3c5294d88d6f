"""
Gatherly Backend — Cloudinary Media Gateway
=============================================

What:  MediaGateway implementation for the Cloudinary upload API.
Why:   Profile photos are hosted externally; the database only stores the
       public id and URL the host hands back.
How:   Signed multipart POSTs over httpx, wrapped in tenacity retries and a
       circuit breaker shared by every request in the process.

Resilience Strategy:
    1. Tenacity retry with exponential backoff + jitter, only for failures
       that can succeed on retry (transport errors, 5xx, 429)
    2. 4xx responses (bad format, file too large) fail immediately
    3. Circuit breaker: after N consecutive exhausted calls, reject instantly
       for M seconds, then let a single trial call through

Request Signing:
    signature = sha1("folder=...&public_id=...&timestamp=..." + api_secret)
    All signed parameters, sorted by name and joined with '&'. The file,
    api_key and resource type are never part of the signature.
"""

import hashlib
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)
from tenacity.wait import wait_base

from app.config import settings
from app.exceptions import CircuitBreakerOpenError, MediaGatewayError
from app.services.media_base import MediaGateway, PhotoUploadResult

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Circuit Breaker
# ══════════════════════════════════════════════════════════════════════════

class CircuitBreaker:
    """
    Circuit breaker guarding the image host.

    State Machine:
        CLOSED → (failure_count >= threshold) → OPEN
        OPEN → (recovery_timeout elapsed) → HALF_OPEN
        HALF_OPEN → success → CLOSED | failure → OPEN

    Not thread-safe; uvicorn async workers share one event loop per process,
    and each process keeps its own breaker.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self, failure_threshold: int = 5, recovery_timeout: int = 60):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time: Optional[float] = None

    def can_execute(self) -> bool:
        """
        Returns True when a call may proceed.

        Raises:
            CircuitBreakerOpenError if OPEN and the recovery timeout has not elapsed.
        """
        if self.state == self.OPEN:
            elapsed = time.time() - (self.last_failure_time or 0)
            if elapsed < self.recovery_timeout:
                raise CircuitBreakerOpenError(recovery_time=int(self.recovery_timeout - elapsed))
            logger.info("Media circuit breaker HALF_OPEN after %.1fs", elapsed)
            self.state = self.HALF_OPEN
        return True

    def record_success(self) -> None:
        if self.state == self.HALF_OPEN:
            logger.info("Media circuit breaker CLOSED (host recovered)")
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time = None

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = time.time()

        if self.state == self.HALF_OPEN:
            logger.warning("Media circuit breaker back to OPEN (trial call failed)")
            self.state = self.OPEN
        elif self.failure_count >= self.failure_threshold:
            logger.warning(
                "Media circuit breaker OPENING after %d consecutive failures",
                self.failure_count,
            )
            self.state = self.OPEN


class _RetryableResponse(Exception):
    """A response status worth retrying (5xx, 429)."""

    def __init__(self, response: httpx.Response):
        self.response = response
        super().__init__(f"HTTP {response.status_code}")


# ══════════════════════════════════════════════════════════════════════════
# Gateway
# ══════════════════════════════════════════════════════════════════════════

class CloudinaryMediaGateway(MediaGateway):
    """
    Uploads and deletes images through the Cloudinary REST API.

    Args:
        cloud_name / api_key / api_secret: account credentials
        client: optional shared httpx.AsyncClient (tests inject one backed
            by httpx.MockTransport); a short-lived client is used otherwise
        wait: tenacity wait strategy between attempts
    """

    def __init__(
        self,
        cloud_name: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        folder: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        max_attempts: Optional[int] = None,
        wait: Optional[wait_base] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
    ):
        self.cloud_name = cloud_name if cloud_name is not None else settings.media_cloud_name
        self.api_key = api_key if api_key is not None else settings.media_api_key
        self.api_secret = api_secret if api_secret is not None else settings.media_api_secret
        self.base_url = (base_url or settings.media_base_url).rstrip("/")
        self.folder = folder if folder is not None else settings.media_upload_folder
        self.transformation = settings.media_transformation
        self._client = client
        self.max_attempts = max_attempts or settings.retry_max_attempts
        # min_wait * 2^attempt capped at max_wait, plus 0-1s of jitter
        self.wait = wait or (
            wait_exponential(multiplier=settings.retry_min_wait, max=settings.retry_max_wait)
            + wait_random(0, 1)
        )
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=settings.cb_failure_threshold,
            recovery_timeout=settings.cb_recovery_timeout,
        )

    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    # ── Public API ────────────────────────────────────────────────────────

    async def upload(self, content: bytes, filename: str) -> PhotoUploadResult:
        """
        Upload image bytes; returns the host's public_id and secure_url.

        Raises:
            CircuitBreakerOpenError: too many recent failures
            MediaGatewayError: rejected or unreachable after retries
        """
        params = {"timestamp": str(int(time.time()))}
        if self.folder:
            params["folder"] = self.folder
        if self.transformation:
            params["transformation"] = self.transformation

        body = await self._call(
            "upload",
            data=self._signed(params),
            files={"file": (filename or "upload", content)},
        )

        public_id = body.get("public_id")
        url = body.get("secure_url") or body.get("url")
        if not public_id or not url:
            self.circuit_breaker.record_failure()
            raise MediaGatewayError(
                message="The image host returned an incomplete response",
                context={"keys": sorted(body.keys())},
            )
        logger.info("Uploaded image %s (%d bytes)", public_id, len(content))
        return PhotoUploadResult(public_id=public_id, url=url)

    async def delete(self, public_id: str) -> bool:
        """Destroy an image by public_id. False means the host did not know it."""
        params = {"public_id": public_id, "timestamp": str(int(time.time()))}
        body = await self._call("destroy", data=self._signed(params))
        outcome = body.get("result")
        if outcome == "ok":
            logger.info("Deleted image %s", public_id)
            return True
        logger.warning("Image host did not delete %s: result=%s", public_id, outcome)
        return False

    # ── Internals ─────────────────────────────────────────────────────────

    def _signed(self, params: Dict[str, str]) -> Dict[str, str]:
        to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
        signature = hashlib.sha1((to_sign + self.api_secret).encode("utf-8")).hexdigest()
        return {**params, "api_key": self.api_key, "signature": signature}

    @asynccontextmanager
    async def _http(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
        else:
            async with httpx.AsyncClient(timeout=settings.media_timeout_seconds) as client:
                yield client

    async def _call(self, action: str, data: Dict[str, str], files=None) -> dict:
        """
        POST to /{cloud_name}/image/{action} with retry and circuit breaker.

        Only the HTTP exchange is retried; the breaker check runs once per
        logical call so an OPEN circuit fails in under a millisecond.
        """
        call_id = str(uuid.uuid4())[:8]
        if not self.is_configured():
            raise MediaGatewayError(
                message="Image hosting is not configured",
                context={"action": action},
            )
        self.circuit_breaker.can_execute()

        url = f"{self.base_url}/{self.cloud_name}/image/{action}"
        start_time = time.time()
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type((httpx.TransportError, _RetryableResponse)),
                stop=stop_after_attempt(self.max_attempts),
                wait=self.wait,
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            ):
                with attempt:
                    async with self._http() as client:
                        response = await client.post(url, data=data, files=files)
                    if response.status_code >= 500 or response.status_code == 429:
                        raise _RetryableResponse(response)
        except (httpx.TransportError, _RetryableResponse) as e:
            self.circuit_breaker.record_failure()
            logger.error(
                "[%s] Image host %s failed after %d attempts: %s",
                call_id, action, self.max_attempts, str(e),
            )
            raise MediaGatewayError(context={"call_id": call_id, "action": action, "error": str(e)})

        duration_ms = (time.time() - start_time) * 1000
        if response.status_code >= 400:
            # The host is healthy; it rejected this particular request.
            self.circuit_breaker.record_success()
            message = _error_message(response)
            logger.warning(
                "[%s] Image host rejected %s (HTTP %d) in %.0fms: %s",
                call_id, action, response.status_code, duration_ms, message,
            )
            raise MediaGatewayError(
                message=message or "The image host rejected the file",
                context={"call_id": call_id, "status": response.status_code},
            )

        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            self.circuit_breaker.record_failure()
            logger.error("[%s] Image host %s returned a non-object body", call_id, action)
            raise MediaGatewayError(
                message="The image host returned an unreadable response",
                context={"call_id": call_id, "action": action},
            )

        self.circuit_breaker.record_success()
        logger.debug("[%s] Image host %s completed in %.0fms", call_id, action, duration_ms)
        return body


def _error_message(response: httpx.Response) -> Optional[str]:
    """Extracts {"error": {"message": ...}} from an error body, if present."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        return error.get("message")
    return None


# ── Singleton Instance ────────────────────────────────────────────────────
# Shared so the circuit breaker sees every request in the process.
media_gateway = CloudinaryMediaGateway()
