"""
PlaceShare Backend: Exception Hierarchy
=======================================

What:  Application exceptions, one per error kind the API can report.
How:   Each exception carries a user-facing message and an optional context
       dict (logged, never returned). Global handlers in main.py turn them
       into `{error, message, request_id}` JSON with the matching status.

Exception Hierarchy:
    PlaceShareError (base)
    ├── ValidationError          → 422 Unprocessable Entity
    │   └── GeocodingError       → 422 (address could not be resolved)
    ├── NotFoundError            → 404 Not Found
    ├── UnauthorizedError        → 401 Unauthorized
    ├── BadRequestError          → 400 Bad Request (malformed identifier)
    └── InternalError            → 500 Internal Server Error
        ├── DatabaseError
        └── FileStorageError

Core workflows do not raise these directly; they return a `Result` (see
results.py) whose `unwrap()` raises the exception for its `ErrorKind`.
"""

from typing import Any, Dict, Optional


class PlaceShareError(Exception):
    """
    Base exception for all PlaceShare application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500
    error_code = "internal_server_error"

    def __init__(
        self,
        message: str = "An unknown error occurred!",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PlaceShareError):
    """
    Raised when client input fails validation.

    When:    Empty title, short description, bad image type, taken email.
    HTTP:    422 Unprocessable Entity
    """

    status_code = 422
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Invalid inputs passed, please check your data.",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class GeocodingError(ValidationError):
    """Raised when an address cannot be turned into coordinates."""

    def __init__(
        self,
        message: str = "Could not find location for the specified address.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, field="address", context=context)


class NotFoundError(PlaceShareError):
    """
    Raised when a referenced place or user does not exist.

    HTTP:    404 Not Found
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        message: str = "Could not find the requested resource.",
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class UnauthorizedError(PlaceShareError):
    """
    Raised when the caller is unauthenticated or does not own the resource.

    HTTP:    401 Unauthorized
    """

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Authentication failed!",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class BadRequestError(PlaceShareError):
    """
    Raised when an identifier in the URL is malformed.

    HTTP:    400 Bad Request
    """

    status_code = 400
    error_code = "bad_request"

    def __init__(
        self,
        message: str = "Invalid place ID.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InternalError(PlaceShareError):
    """
    Raised when storage or the filesystem fails.

    HTTP:    500 Internal Server Error

    The message is generic on purpose; details go to `context`, which is
    only ever logged.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "Something went wrong, please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(InternalError):
    """A query, insert, delete or commit failed (or timed out)."""


class FileStorageError(InternalError):
    """Could not write an uploaded file to the storage volume."""

    def __init__(
        self,
        message: str = "Failed to save uploaded image. Please try again.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
