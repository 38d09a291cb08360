"""Resolvers for the failures every FastAPI application produces."""

from __future__ import annotations

from http import HTTPStatus

from starlette.exceptions import HTTPException as StarletteHTTPException

from rest_errors.core.config import Settings, get_settings
from rest_errors.domain.categories import (
    FailureCategory,
    classify_failure,
    error_location_name,
    missing_parameters,
    missing_parts,
    validation_errors,
)
from rest_errors.errors import ApiError
from rest_errors.resolvers.base import ErrorResolver
from rest_errors.resolvers.chain import ChainErrorResolver
from rest_errors.resolvers.mapping import ErrorDefinition, ExceptionMappingResolver
from rest_errors.schemas.error import ErrorResponse, FieldError, RestError

_BAD_REQUEST = 400
_INTERNAL_SERVER_ERROR = 500


class ApiErrorResolver(ErrorResolver):
    def resolve_error(self, exc: Exception) -> RestError | None:
        if not isinstance(exc, ApiError):
            return None
        return RestError(http_status=exc.status_code, body=exc.payload)


class RequestValidationResolver(ErrorResolver):
    """Renders request validation failures as 400 errors keyed by category."""

    def resolve_error(self, exc: Exception) -> RestError | None:
        category = classify_failure(exc)
        if category is None:
            return None

        if category is FailureCategory.MALFORMED_BODY:
            payload = ErrorResponse(code="MALFORMED_BODY", message="Request body could not be parsed")
        elif category is FailureCategory.MISSING_PARAMETER:
            payload = ErrorResponse(
                code="MISSING_PARAMETER",
                message="Required request parameter is missing",
                details={"parameters": missing_parameters(exc)},
            )
        elif category is FailureCategory.MISSING_PART:
            payload = ErrorResponse(
                code="MISSING_PART",
                message="Required request part is missing",
                details={"parts": missing_parts(exc)},
            )
        else:
            fields = [
                FieldError(
                    field=error_location_name(error),
                    message=str(error.get("msg", "")),
                    type=str(error.get("type", "")),
                ).model_dump()
                for error in validation_errors(exc)
            ]
            payload = ErrorResponse(
                code="VALIDATION_ERROR",
                message="Request validation failed",
                details={"fields": fields},
            )
        return RestError(http_status=_BAD_REQUEST, body=payload)


class HttpExceptionResolver(ErrorResolver):
    def resolve_error(self, exc: Exception) -> RestError | None:
        if not isinstance(exc, StarletteHTTPException):
            return None
        if isinstance(exc.detail, str):
            payload = ErrorResponse(code="HTTP_ERROR", message=exc.detail)
        else:
            payload = ErrorResponse(
                code="HTTP_ERROR",
                message=_status_phrase(exc.status_code),
                details={"detail": exc.detail},
            )
        return RestError(http_status=exc.status_code, body=payload)


def _status_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "HTTP error"


def build_default_error_resolver(settings: Settings | None = None) -> ChainErrorResolver:
    """Resolver chain covering application, validation and HTTP errors.

    With ``map_unclassified_errors`` on, any other exception becomes a 500
    ``UNCLASSIFIED_ERROR`` instead of falling through to the server default.
    """
    settings = settings or get_settings()
    resolvers: list[ErrorResolver] = [
        ApiErrorResolver(),
        RequestValidationResolver(),
        HttpExceptionResolver(),
    ]
    if settings.map_unclassified_errors:
        message = None if settings.expose_error_messages else "Internal server error"
        resolvers.append(
            ExceptionMappingResolver(
                {Exception: ErrorDefinition(_INTERNAL_SERVER_ERROR, "UNCLASSIFIED_ERROR", message)},
            )
        )
    return ChainErrorResolver(resolvers)


__all__ = [
    "ApiErrorResolver",
    "HttpExceptionResolver",
    "RequestValidationResolver",
    "build_default_error_resolver",
]
