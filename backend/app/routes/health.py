"""
Gatherly Backend — Health Check Route
=======================================

What:  Liveness/readiness probe for Docker and load balancers.
How:   SELECT 1 against the database, plus the media gateway's local state
       (credentials present, circuit breaker not open). The image host
       itself is not called; an upload probe would cost quota.

Status levels:
    healthy    database connected, gateway usable
    degraded   database connected, gateway unconfigured or circuit open
               (everything except photo uploads still works)
    unhealthy  database unreachable
"""

import logging
import time

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app import __version__
from app.database import engine
from app.dependencies import get_media_gateway
from app.schemas.common import HealthResponse
from app.services.media_base import MediaGateway

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
)
async def health_check(
    response: Response,
    media: MediaGateway = Depends(get_media_gateway),
) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    breaker = getattr(media, "circuit_breaker", None)
    if not media.is_configured():
        media_status = "unconfigured"
    elif breaker is not None and breaker.state == breaker.OPEN:
        media_status = "circuit_open"
    else:
        media_status = "configured"
    if media_status != "configured" and overall == "healthy":
        overall = "degraded"

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        media_gateway=media_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
