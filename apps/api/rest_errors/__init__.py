"""Exception-to-response mapping for FastAPI applications."""

from .errors import ApiError, MessageNotWritableError
from .resolvers import ChainErrorResolver, ErrorResolver, build_default_error_resolver
from .schemas.error import ErrorResponse, RestError
from .services.exception_handler import RestExceptionHandler, install_exception_handler

__all__ = [
    "ApiError",
    "ChainErrorResolver",
    "ErrorResolver",
    "ErrorResponse",
    "MessageNotWritableError",
    "RestError",
    "RestExceptionHandler",
    "build_default_error_resolver",
    "install_exception_handler",
]
