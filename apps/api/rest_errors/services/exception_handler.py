"""Exception handler that renders resolved errors through content negotiation."""

from __future__ import annotations

from collections.abc import Callable, Iterable
import logging

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from rest_errors.adapters.serializers.base import MessageSerializer
from rest_errors.core.config import Settings, get_settings
from rest_errors.core.logging_safety import endpoint_name, request_correlation_id, safe_log_identifier
from rest_errors.domain.categories import FORCED_CATEGORY_RULES, FailureCategory, classify_failure
from rest_errors.domain.dispatch import is_include_request
from rest_errors.domain.media_type import MediaType, accepted_media_types
from rest_errors.errors import ApiError
from rest_errors.resolvers.base import ErrorResolver
from rest_errors.services.framework_defaults import FrameworkDefaultResolver

logger = logging.getLogger(__name__)

_SERVER_ERROR_STATUS = 500
_SERVER_ERROR_TEXT = "Internal Server Error"
_EXPECTED_EXCEPTION_CLASSES: tuple[type[Exception], ...] = (
    StarletteHTTPException,
    RequestValidationError,
    ValidationError,
    ApiError,
)


class RestExceptionHandler:
    """Turns exceptions raised by endpoints into negotiated error responses.

    Forced categories (malformed body, missing parameter, missing part,
    validation) go straight to the configured resolver. Everything else is
    first offered to FastAPI's default handlers, and only falls back to the
    resolver when those do not produce a response.

    The resolver, serializers and settings are fixed at construction and only
    read afterwards, so one instance serves concurrent requests.
    """

    def __init__(
        self,
        *,
        error_resolver: ErrorResolver,
        serializers: Iterable[MessageSerializer],
        settings: Settings | None = None,
        framework_defaults: FrameworkDefaultResolver | None = None,
        forced_rules: Iterable[tuple[FailureCategory, Callable[[Exception], bool]]] = FORCED_CATEGORY_RULES,
    ) -> None:
        self._error_resolver = error_resolver
        self._serializers = tuple(serializers)
        self._settings = settings or get_settings()
        self._framework_defaults = framework_defaults or FrameworkDefaultResolver()
        self._forced_rules = tuple(forced_rules)

    async def resolve_exception(self, request: Request, response: Response, exc: Exception) -> Response | None:
        """Render ``exc`` into ``response``.

        Returns the response that should be sent: ``response`` itself when the
        custom path wrote it, FastAPI's own response when the framework default
        handled the failure, or ``None`` when nothing was rendered.
        """
        correlation_id = safe_log_identifier(request_correlation_id(request), prefix="cid")
        logger.error(
            "error.caught correlation_id=%s method=%s path=%s handler=%s exc_type=%s",
            correlation_id,
            request.method,
            request.url.path,
            endpoint_name(request),
            type(exc).__name__,
            exc_info=exc,
        )

        category = classify_failure(exc, self._forced_rules)
        if category is None:
            default_response = await self._framework_defaults.resolve(request, exc)
            if default_response is not None:
                return default_response
        else:
            logger.debug(
                "error.forced_custom correlation_id=%s category=%s",
                correlation_id,
                category.value,
            )

        return self.handle_custom_exception(request, response, exc)

    def handle_custom_exception(self, request: Request, response: Response, exc: Exception) -> Response | None:
        error = self._error_resolver.resolve_error(exc)
        if error is None:
            return None

        if not self._settings.atomic_status:
            self._apply_status_if_possible(request, response, error.http_status)

        accepted = accepted_media_types(request.headers.get("accept"))
        body_type = type(error.body)
        selected = self._select_serializer(body_type, accepted)
        if selected is None:
            logger.warning(
                "error.no_serializer body_type=%s accepted=%s",
                body_type.__qualname__,
                ", ".join(str(media_type) for media_type in accepted),
            )
            return None

        if self._settings.atomic_status:
            self._apply_status_if_possible(request, response, error.http_status)

        serializer, media_type = selected
        try:
            serializer.write(error.body, media_type, response)
        except OSError as write_exc:
            logger.warning(
                "error.write_failed body_type=%s media_type=%s serializer=%s",
                body_type.__qualname__,
                media_type,
                type(serializer).__name__,
                exc_info=write_exc,
            )
            return None
        return response

    def _select_serializer(
        self, body_type: type, accepted: list[MediaType]
    ) -> tuple[MessageSerializer, MediaType] | None:
        for media_type in accepted:
            for serializer in self._serializers:
                if serializer.can_write(body_type, media_type):
                    return serializer, media_type
        return None

    @staticmethod
    def _apply_status_if_possible(request: Request, response: Response, status_code: int) -> None:
        if not is_include_request(request):
            response.status_code = status_code


def install_exception_handler(
    app: Starlette,
    handler: RestExceptionHandler,
    *,
    exception_classes: Iterable[type[Exception]] = (),
) -> None:
    """Route every exception raised by ``app`` through ``handler``.

    Classes in ``_EXPECTED_EXCEPTION_CLASSES`` and ``exception_classes`` are
    handled inside the routing stack. Anything else reaches Starlette's
    server-error middleware, which still re-raises it to the server after the
    response is sent. Unrendered failures get the generic server error
    response.
    """

    async def handle_exception(request: Request, exc: Exception) -> Response:
        resolved = await handler.resolve_exception(request, Response(), exc)
        if resolved is None:
            return PlainTextResponse(_SERVER_ERROR_TEXT, status_code=_SERVER_ERROR_STATUS)
        return resolved

    for exc_class in (*_EXPECTED_EXCEPTION_CLASSES, *exception_classes, Exception):
        app.add_exception_handler(exc_class, handle_exception)


__all__ = ["RestExceptionHandler", "install_exception_handler"]
