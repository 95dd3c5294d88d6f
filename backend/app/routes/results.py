"""
Gatherly Backend — Result → HTTP Mapping
==========================================

The one place where workflow outcomes become HTTP semantics:

    None                    → 404 (NotFoundError)
    Failure(message)        → 400 with the message (ValidationError)
    Success(None), read     → 404
    Success(None), command  → 200, empty body
    Success(value)          → value, serialized by the route's response_model

Routes call handle_result() and return what it gives back; the global
exception handlers in main.py render the raised errors.
"""

from typing import Optional, TypeVar

from app.core.result import Result
from app.exceptions import NotFoundError, ValidationError

T = TypeVar("T")


def handle_result(
    result: Optional[Result[T]],
    resource: str = "resource",
    resource_id: Optional[str] = None,
    read: bool = True,
) -> Optional[T]:
    if result is None:
        raise NotFoundError(resource=resource, resource_id=resource_id)
    if result.is_failure:
        raise ValidationError(result.error)
    if result.value is None and read:
        raise NotFoundError(resource=resource, resource_id=resource_id)
    return result.value
