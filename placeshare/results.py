"""
PlaceShare Backend: Operation Results
=====================================

What:  A small Result type returned by the core workflows (ownership checks,
       transactional create/delete, owner updates).
How:   A Result holds either a value or a Failure(kind, message, context).
       Workflows return early on the first failure; the service boundary
       calls `unwrap()`, which raises the exception mapped to the kind so
       FastAPI's global handlers can render it.

Example:
    result = guard.authorize(place.creator_id, caller_id)
    if not result.ok:
        return result.cast()
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, Type, TypeVar

from placeshare.exceptions import (
    BadRequestError,
    InternalError,
    NotFoundError,
    PlaceShareError,
    UnauthorizedError,
    ValidationError,
)

T = TypeVar("T")
U = TypeVar("U")


class ErrorKind(str, Enum):
    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    BAD_REQUEST = "bad_request"
    INTERNAL = "server_error"


_EXCEPTION_FOR_KIND: Dict[ErrorKind, Type[PlaceShareError]] = {
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.UNAUTHORIZED: UnauthorizedError,
    ErrorKind.BAD_REQUEST: BadRequestError,
    ErrorKind.INTERNAL: InternalError,
}


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str
    context: Dict[str, Any] = field(default_factory=dict)

    def to_exception(self) -> PlaceShareError:
        exc_class = _EXCEPTION_FOR_KIND[self.kind]
        return exc_class(message=self.message, context=dict(self.context))


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    failure: Optional[Failure] = None

    @classmethod
    def success(cls, value: T = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str, **context: Any) -> "Result[T]":
        return cls(failure=Failure(kind=kind, message=message, context=context))

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.failure.kind if self.failure else None

    def cast(self) -> "Result[U]":
        """Re-type a failed result so it can be returned from another workflow."""
        if self.failure is None:
            raise ValueError("Only a failed Result can be cast")
        return Result(failure=self.failure)

    def unwrap(self) -> T:
        """Return the value, or raise the exception matching the failure kind."""
        if self.failure is not None:
            raise self.failure.to_exception()
        return self.value
