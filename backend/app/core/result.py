"""
Gatherly Backend — Result Envelope
====================================

What:  A tagged success/failure wrapper returned by every workflow.
Why:   Expected outcomes ("nothing was saved", "that is already your main
       photo") are data, not exceptions. Routes branch on them explicitly.
How:   Result.success(value) or Result.failure(message). There is no third
       state; "not found" is expressed by the workflow returning None instead
       of a Result (see DESIGN.md, Open Questions).

Example:
    result = await photo_service.add_photo(content, filename)
    if result is None:          # caller has no user record
        ...
    elif result.is_success:
        photo = result.value
    else:
        logger.warning(result.error)
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a workflow: a value on success, a message on failure."""

    is_success: bool
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(is_success=True, value=value)

    @classmethod
    def failure(cls, error: str) -> "Result[T]":
        if not error:
            raise ValueError("A failed Result needs a message")
        return cls(is_success=False, error=error)

    @property
    def is_failure(self) -> bool:
        return not self.is_success

    def __repr__(self) -> str:
        if self.is_success:
            return f"Success({self.value!r})"
        return f"Failure({self.error!r})"
