"""Error resolver interface."""

from abc import ABC, abstractmethod

from rest_errors.schemas.error import RestError


class ErrorResolver(ABC):
    """Maps a caught exception to a structured error.

    Implementations must be pure: no I/O, no logging, no shared state.
    """

    @abstractmethod
    def resolve_error(self, exc: Exception) -> RestError | None:
        """Return the error to render, or ``None`` when the exception is not recognized."""


__all__ = ["ErrorResolver"]
