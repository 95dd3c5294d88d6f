"""
Gatherly Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for errors that abort a request.
Why:   Global exception handlers (main.py) map each type to an HTTP status
       and a structured JSON body without leaking internal details.
How:   Each exception carries a user-safe message and an optional context
       dict that is logged but never returned to the client.

Exception Hierarchy:
    GatherlyError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── ForbiddenError           → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── DatabaseError            → 500 Internal Server Error
    ├── MediaGatewayError        → 502 Bad Gateway
    └── CircuitBreakerOpenError  → 503 Service Unavailable

Relationship to Result:
    Expected workflow outcomes ("user has no such photo", "nothing was
    saved") travel as Result values (app.core.result). Exceptions are for
    the cases that end the request outright: bad credentials, a non-host
    editing an activity, infrastructure failures.
"""

from typing import Any, Dict, Optional


class GatherlyError(Exception):
    """
    Base exception for all Gatherly application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(GatherlyError):
    """
    Raised when client input fails a business rule, or when a workflow
    returns a Failure result.

    HTTP: 400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(GatherlyError):
    """
    Raised when the caller cannot be identified.

    When: Missing/expired/invalid bearer token, or wrong login credentials.
    HTTP: 401 Unauthorized (with WWW-Authenticate: Bearer)
    """

    def __init__(
        self,
        message: str = "Could not validate credentials",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(GatherlyError):
    """
    Raised when an identified caller may not perform the operation.

    When: A non-host tries to edit or delete an activity.
    HTTP: 403 Forbidden
    """

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(GatherlyError):
    """
    Raised when a requested resource does not exist.

    Services return None for a missing aggregate; the route layer converts
    that None into this exception so the 404 mapping lives in one place.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(GatherlyError):
    """
    Raised when a database operation fails unexpectedly.

    The client always receives a generic message; the constraint name,
    SQL and driver error stay in the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MediaGatewayError(GatherlyError):
    """
    Raised by the media gateway when an upload or delete fails after retries.

    Workflows catch this and turn it into a Failure result; it only reaches
    the global handler when a caller chooses not to branch on it.
    HTTP: 502 Bad Gateway
    """

    def __init__(
        self,
        message: str = "The image hosting service could not complete the request",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class CircuitBreakerOpenError(MediaGatewayError):
    """
    Raised when the media gateway circuit breaker is OPEN.

    Subclasses MediaGatewayError so workflows handle it the same way as any
    other gateway failure.
    HTTP: 503 Service Unavailable
    """

    def __init__(
        self,
        recovery_time: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            "Image hosting is temporarily unavailable due to repeated failures. "
            f"Please retry in approximately {recovery_time} seconds."
        )
        ctx = context or {}
        ctx["recovery_time"] = recovery_time
        super().__init__(message=message, context=ctx)
        self.recovery_time = recovery_time


class RateLimitExceededError(GatherlyError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP: 429 Too Many Requests (with Retry-After header)
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
