"""Application exception types."""

from rest_errors.schemas.error import ErrorResponse


class ApiError(Exception):
    """Structured API error that maps directly to contract error payloads."""

    def __init__(self, status_code: int, code: str, message: str, details: dict | None = None) -> None:
        self.status_code = status_code
        self.payload = ErrorResponse(code=code, message=message, details=details)
        super().__init__(message)


class MessageNotWritableError(OSError):
    """Raised when a serializer cannot encode an error body."""


__all__ = ["ApiError", "MessageNotWritableError"]
