"""
Gatherly Backend — Shared Schema Pieces
=========================================

What:  The camelCase base model plus the error and health response shapes
       used by every route.
Why:   The browser client speaks camelCase JSON (displayName, isMain), while
       Python code stays snake_case. CamelModel bridges the two: responses
       serialize by alias, requests accept either spelling.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every API schema: snake_case fields, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "You cannot delete your main photo",
            "request_id": "550e8400"
        }

    Request-schema failures use `errors` instead of `details`, keyed by field
    name, so the client can render them next to form inputs.
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    errors: Optional[dict] = Field(default=None, description="Field name → list of messages")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    media_gateway: str = Field(description="Image hosting status: configured, unconfigured, circuit_open")
    uptime_seconds: float = Field(description="Seconds since service started")
