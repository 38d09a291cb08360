"""Failure categories that always take the custom resolution path.

FastAPI answers every request validation problem with its own 422 handler.
These rules pull the common client-error categories out of that default so
they are rendered by the configured resolver like any other failure.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.datastructures import FormData

_PARAMETER_LOCATIONS = frozenset({"query", "header", "cookie", "path"})


class FailureCategory(str, Enum):
    MALFORMED_BODY = "MALFORMED_BODY"
    MISSING_PARAMETER = "MISSING_PARAMETER"
    MISSING_PART = "MISSING_PART"
    VALIDATION = "VALIDATION"


def validation_errors(exc: Exception) -> list[dict[str, Any]]:
    if isinstance(exc, (RequestValidationError, ValidationError)):
        return list(exc.errors())
    return []


def _missing_errors(exc: Exception, *, locations: frozenset[str]) -> list[dict[str, Any]]:
    return [
        error
        for error in validation_errors(exc)
        if error.get("type") == "missing" and error.get("loc") and error["loc"][0] in locations
    ]


def error_location_name(error: dict[str, Any]) -> str:
    """Dotted field path without the leading location segment."""
    loc = tuple(error.get("loc") or ())
    if loc and loc[0] in _PARAMETER_LOCATIONS | {"body"}:
        loc = loc[1:]
    return ".".join(str(part) for part in loc) or "-"


def is_malformed_body(exc: Exception) -> bool:
    if not isinstance(exc, RequestValidationError):
        return False
    return any(error.get("type") == "json_invalid" for error in exc.errors())


def missing_parameters(exc: Exception) -> list[str]:
    if not isinstance(exc, RequestValidationError):
        return []
    return [error_location_name(error) for error in _missing_errors(exc, locations=_PARAMETER_LOCATIONS)]


def missing_parts(exc: Exception) -> list[str]:
    if not isinstance(exc, RequestValidationError) or not isinstance(exc.body, FormData):
        return []
    return [error_location_name(error) for error in _missing_errors(exc, locations=frozenset({"body"}))]


def is_validation_failure(exc: Exception) -> bool:
    return isinstance(exc, (RequestValidationError, ValidationError))


FORCED_CATEGORY_RULES: tuple[tuple[FailureCategory, Callable[[Exception], bool]], ...] = (
    (FailureCategory.MALFORMED_BODY, is_malformed_body),
    (FailureCategory.MISSING_PARAMETER, lambda exc: bool(missing_parameters(exc))),
    (FailureCategory.MISSING_PART, lambda exc: bool(missing_parts(exc))),
    (FailureCategory.VALIDATION, is_validation_failure),
)


def classify_failure(
    exc: Exception,
    rules: tuple[tuple[FailureCategory, Callable[[Exception], bool]], ...] = FORCED_CATEGORY_RULES,
) -> FailureCategory | None:
    """Return the first category whose rule matches, in rule order."""
    for category, matches in rules:
        if matches(exc):
            return category
    return None
