"""Error payload schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class FieldError(BaseModel):
    field: str
    message: str
    type: str


class RestError(BaseModel):
    """Resolved error: the status to apply and the body to serialize."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    http_status: int
    body: Any
