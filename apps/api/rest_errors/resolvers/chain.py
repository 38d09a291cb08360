"""Resolver composition."""

from collections.abc import Iterable

from rest_errors.resolvers.base import ErrorResolver
from rest_errors.schemas.error import RestError


class ChainErrorResolver(ErrorResolver):
    """Asks each resolver in turn; the first non-``None`` result wins."""

    def __init__(self, resolvers: Iterable[ErrorResolver]) -> None:
        self._resolvers = tuple(resolvers)

    def resolve_error(self, exc: Exception) -> RestError | None:
        for resolver in self._resolvers:
            error = resolver.resolve_error(exc)
            if error is not None:
                return error
        return None


__all__ = ["ChainErrorResolver"]
