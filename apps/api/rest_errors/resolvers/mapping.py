"""Exception-class to error-definition mapping."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from rest_errors.resolvers.base import ErrorResolver
from rest_errors.schemas.error import ErrorResponse, RestError


@dataclass(frozen=True, slots=True)
class ErrorDefinition:
    """Static description of how one exception class is rendered.

    ``message`` may be a fixed string or a callable building it from the
    exception. ``None`` uses ``str(exc)``.
    """

    http_status: int
    code: str
    message: str | Callable[[Exception], str] | None = None

    def build(self, exc: Exception) -> RestError:
        if self.message is None:
            message = str(exc) or type(exc).__name__
        elif callable(self.message):
            message = self.message(exc)
        else:
            message = self.message
        return RestError(http_status=self.http_status, body=ErrorResponse(code=self.code, message=message))


class ExceptionMappingResolver(ErrorResolver):
    """Resolves exceptions by walking their MRO against registered classes."""

    def __init__(self, mappings: Mapping[type[BaseException], ErrorDefinition]) -> None:
        self._mappings = dict(mappings)

    def definition_for(self, exc_type: type[BaseException]) -> ErrorDefinition | None:
        for klass in exc_type.__mro__:
            definition = self._mappings.get(klass)
            if definition is not None:
                return definition
        return None

    def resolve_error(self, exc: Exception) -> RestError | None:
        definition = self.definition_for(type(exc))
        if definition is None:
            return None
        return definition.build(exc)


__all__ = ["ErrorDefinition", "ExceptionMappingResolver"]
