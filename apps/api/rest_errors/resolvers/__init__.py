"""Error resolvers."""

from .base import ErrorResolver
from .chain import ChainErrorResolver
from .defaults import (
    ApiErrorResolver,
    HttpExceptionResolver,
    RequestValidationResolver,
    build_default_error_resolver,
)
from .mapping import ErrorDefinition, ExceptionMappingResolver

__all__ = [
    "ApiErrorResolver",
    "ChainErrorResolver",
    "ErrorDefinition",
    "ErrorResolver",
    "ExceptionMappingResolver",
    "HttpExceptionResolver",
    "RequestValidationResolver",
    "build_default_error_resolver",
]
