"""FastAPI's own exception handling, consulted before custom resolution."""

from fastapi.exception_handlers import http_exception_handler, request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import Response


class FrameworkDefaultResolver:
    """Delegates well-known framework failures to FastAPI's built-in handlers."""

    async def resolve(self, request: Request, exc: Exception) -> Response | None:
        if isinstance(exc, RequestValidationError):
            return await request_validation_exception_handler(request, exc)
        if isinstance(exc, StarletteHTTPException):
            return await http_exception_handler(request, exc)
        return None


__all__ = ["FrameworkDefaultResolver"]
