"""
PlaceShare Backend: Shared Response Schemas
===========================================

What:  Error and health payloads used by every router.
"""

from typing import Optional, Type, TypeVar

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from placeshare.exceptions import ValidationError

M = TypeVar("M", bound=BaseModel)


def validate_form(model: Type[M], **fields) -> M:
    """
    Build a request model from multipart form fields.

    Form fields arrive as plain strings next to the uploaded file, so the
    model is validated here and failures surface as the usual 422.
    """
    try:
        return model.model_validate(fields)
    except PydanticValidationError as e:
        raise ValidationError(
            context={"errors": [f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()]},
        )


class ErrorResponse(BaseModel):
    """
    Error format for all API errors.

    Example:
        {
            "error": "unauthorized",
            "message": "You are not allowed to delete this place.",
            "request_id": "1b2c3d4e"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
