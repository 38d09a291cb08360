"""Exception handler orchestration tests."""

from __future__ import annotations

import json
import unittest
from unittest.mock import AsyncMock

from fastapi import HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import Response

from rest_errors.adapters.serializers import JsonSerializer, MessageSerializer, PlainTextSerializer
from rest_errors.core.config import Settings
from rest_errors.domain.dispatch import mark_include_request
from rest_errors.domain.media_type import MediaType
from rest_errors.errors import ApiError, MessageNotWritableError
from rest_errors.resolvers import ErrorResolver, build_default_error_resolver
from rest_errors.schemas.error import ErrorResponse, RestError
from rest_errors.schemas.item import CreateItemRequest
from rest_errors.services.exception_handler import RestExceptionHandler
from rest_errors.services.framework_defaults import FrameworkDefaultResolver

_HANDLER_LOGGER = "rest_errors.services.exception_handler"


def _request(*, accept: str | None = None, correlation_id: str | None = None) -> Request:
    headers: list[tuple[bytes, bytes]] = []
    if accept is not None:
        headers.append((b"accept", accept.encode("latin-1")))
    if correlation_id is not None:
        headers.append((b"x-correlation-id", correlation_id.encode("latin-1")))
    scope = {
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "server": ("testserver", 80),
        "path": "/api/v1/items",
        "raw_path": b"/api/v1/items",
        "root_path": "",
        "query_string": b"",
        "headers": headers,
    }
    return Request(scope)


class _StaticResolver(ErrorResolver):
    def __init__(self, error: RestError | None) -> None:
        self.error = error
        self.seen: list[Exception] = []

    def resolve_error(self, exc: Exception) -> RestError | None:
        self.seen.append(exc)
        return self.error


class _FieldValidationResolver(ErrorResolver):
    def resolve_error(self, exc: Exception) -> RestError | None:
        if not isinstance(exc, ValidationError):
            return None
        field = ".".join(str(part) for part in exc.errors()[0]["loc"])
        return RestError(http_status=400, body={"code": "VALIDATION_ERROR", "field": field})


class _BrokenSerializer(MessageSerializer):
    supported_media_types = (MediaType("application", "json"),)

    def supports(self, body_type: type) -> bool:
        return True

    def encode(self, body, media_type: MediaType) -> bytes:
        raise MessageNotWritableError("socket closed")


class _RecordingSerializer(JsonSerializer):
    def __init__(self, supported: MediaType) -> None:
        self.supported_media_types = (supported,)
        self.written: list[MediaType] = []

    def write(self, body, media_type: MediaType, response: Response) -> None:
        self.written.append(media_type)
        super().write(body, media_type, response)


def _not_found() -> RestError:
    return RestError(http_status=404, body=ErrorResponse(code="RESOURCE_NOT_FOUND", message="Resource not found"))


def _name_validation_error() -> ValidationError:
    try:
        CreateItemRequest.model_validate({"name": ""})
    except ValidationError as exc:
        return exc
    raise AssertionError("expected validation to fail")


class CustomResolutionTests(unittest.IsolatedAsyncioTestCase):
    async def test_declined_failure_writes_nothing(self) -> None:
        handler = RestExceptionHandler(error_resolver=_StaticResolver(None), serializers=(JsonSerializer(),), settings=Settings())
        response = Response()

        result = await handler.resolve_exception(_request(), response, RuntimeError("boom"))

        self.assertIsNone(result)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.body, b"")

    async def test_top_level_dispatch_applies_status(self) -> None:
        handler = RestExceptionHandler(error_resolver=_StaticResolver(_not_found()), serializers=(JsonSerializer(),), settings=Settings())
        response = Response()

        result = await handler.resolve_exception(_request(accept="application/json"), response, KeyError("item"))

        self.assertIs(result, response)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(json.loads(response.body), {"code": "RESOURCE_NOT_FOUND", "message": "Resource not found"})

    async def test_include_dispatch_keeps_status(self) -> None:
        handler = RestExceptionHandler(error_resolver=_StaticResolver(_not_found()), serializers=(JsonSerializer(),), settings=Settings())
        request = _request(accept="application/json")
        mark_include_request(request, "/fragments/item")
        response = Response(status_code=200)

        result = await handler.resolve_exception(request, response, KeyError("item"))

        self.assertIs(result, response)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(json.loads(response.body)["code"], "RESOURCE_NOT_FOUND")

    async def test_accept_preference_skips_unsupported_types(self) -> None:
        json_serializer = _RecordingSerializer(MediaType("application", "json"))
        handler = RestExceptionHandler(error_resolver=_StaticResolver(_not_found()), serializers=(json_serializer,), settings=Settings())
        response = Response()

        result = await handler.resolve_exception(
            _request(accept="application/xml;q=0.9, application/json;q=0.5"), response, KeyError("item")
        )

        self.assertIs(result, response)
        self.assertEqual([str(media_type) for media_type in json_serializer.written], ["application/json;q=0.5"])
        self.assertEqual(response.headers["content-type"], "application/json")

    async def test_preferred_type_wins_over_serializer_order(self) -> None:
        handler = RestExceptionHandler(
            error_resolver=_StaticResolver(_not_found()),
            serializers=(JsonSerializer(), PlainTextSerializer()),
            settings=Settings(),
        )
        response = Response()

        await handler.resolve_exception(_request(accept="application/json;q=0.2, text/plain"), response, KeyError("item"))

        self.assertEqual(response.body, b"RESOURCE_NOT_FOUND: Resource not found")

    async def test_missing_accept_uses_first_capable_serializer(self) -> None:
        handler = RestExceptionHandler(
            error_resolver=_StaticResolver(RestError(http_status=409, body={"code": "CONFLICT"})),
            serializers=(PlainTextSerializer(), JsonSerializer()),
            settings=Settings(),
        )
        response = Response()

        result = await handler.resolve_exception(_request(), response, KeyError("item"))

        self.assertIs(result, response)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.headers["content-type"], "application/json")
        self.assertEqual(json.loads(response.body), {"code": "CONFLICT"})

    async def test_no_acceptable_serializer_is_not_handled(self) -> None:
        handler = RestExceptionHandler(error_resolver=_StaticResolver(_not_found()), serializers=(JsonSerializer(),), settings=Settings())
        response = Response()

        with self.assertLogs(_HANDLER_LOGGER, level="WARNING") as captured:
            result = await handler.resolve_exception(_request(accept="application/xml"), response, KeyError("item"))

        self.assertIsNone(result)
        self.assertEqual(response.body, b"")
        self.assertEqual(response.status_code, 200)
        warnings = [record.getMessage() for record in captured.records if record.levelname == "WARNING"]
        self.assertEqual(len(warnings), 1)
        self.assertIn("error.no_serializer body_type=ErrorResponse", warnings[0])
        self.assertIn("application/xml", warnings[0])

    async def test_non_atomic_status_is_applied_before_negotiation(self) -> None:
        handler = RestExceptionHandler(
            error_resolver=_StaticResolver(_not_found()),
            serializers=(JsonSerializer(),),
            settings=Settings(atomic_status=False),
        )
        response = Response()

        with self.assertLogs(_HANDLER_LOGGER, level="WARNING"):
            result = await handler.resolve_exception(_request(accept="application/xml"), response, KeyError("item"))

        self.assertIsNone(result)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.body, b"")

    async def test_write_fault_is_logged_and_not_handled(self) -> None:
        handler = RestExceptionHandler(error_resolver=_StaticResolver(_not_found()), serializers=(_BrokenSerializer(),), settings=Settings())

        with self.assertLogs(_HANDLER_LOGGER, level="WARNING") as captured:
            result = await handler.resolve_exception(_request(accept="application/json"), Response(), KeyError("item"))

        self.assertIsNone(result)
        self.assertTrue(any("error.write_failed" in record.getMessage() for record in captured.records))

    async def test_self_referencing_body_is_not_handled_and_does_not_escape(self) -> None:
        body: dict = {"code": "LOOP"}
        body["self"] = body
        handler = RestExceptionHandler(
            error_resolver=_StaticResolver(RestError(http_status=409, body=body)),
            serializers=(JsonSerializer(),),
            settings=Settings(),
        )

        with self.assertLogs(_HANDLER_LOGGER, level="WARNING") as captured:
            result = await handler.resolve_exception(_request(accept="application/json"), Response(), KeyError("item"))

        self.assertIsNone(result)
        self.assertTrue(any("error.write_failed" in record.getMessage() for record in captured.records))

    async def test_failure_is_logged_once_at_error_with_hashed_correlation_id(self) -> None:
        handler = RestExceptionHandler(error_resolver=_StaticResolver(None), serializers=(), settings=Settings())
        exc = RuntimeError("boom")

        with self.assertLogs(_HANDLER_LOGGER, level="ERROR") as captured:
            await handler.resolve_exception(_request(correlation_id="corr-123"), Response(), exc)

        errors = [record for record in captured.records if record.levelname == "ERROR"]
        self.assertEqual(len(errors), 1)
        message = errors[0].getMessage()
        self.assertIn("error.caught", message)
        self.assertIn("exc_type=RuntimeError", message)
        self.assertNotIn("corr-123", message)
        self.assertIs(errors[0].exc_info[1], exc)

    async def test_validation_scenario_renders_field_error_as_json(self) -> None:
        handler = RestExceptionHandler(error_resolver=_FieldValidationResolver(), serializers=(JsonSerializer(),), settings=Settings())
        response = Response()

        result = await handler.resolve_exception(_request(accept="application/json"), response, _name_validation_error())

        self.assertIs(result, response)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(json.loads(response.body), {"code": "VALIDATION_ERROR", "field": "name"})


class FrameworkDefaultTests(unittest.IsolatedAsyncioTestCase):
    async def test_framework_default_response_is_returned_unchanged(self) -> None:
        resolver = _StaticResolver(_not_found())
        handler = RestExceptionHandler(error_resolver=resolver, serializers=(JsonSerializer(),), settings=Settings())
        response = Response()

        result = await handler.resolve_exception(_request(), response, HTTPException(status_code=403, detail="Admin role required"))

        self.assertIsNot(result, response)
        self.assertEqual(result.status_code, 403)
        self.assertEqual(json.loads(result.body), {"detail": "Admin role required"})
        self.assertEqual(resolver.seen, [])
        self.assertEqual(response.status_code, 200)

    async def test_forced_categories_bypass_framework_default(self) -> None:
        framework_defaults = FrameworkDefaultResolver()
        framework_defaults.resolve = AsyncMock(return_value=Response(status_code=422))
        handler = RestExceptionHandler(
            error_resolver=build_default_error_resolver(Settings()),
            serializers=(JsonSerializer(),),
            settings=Settings(),
            framework_defaults=framework_defaults,
        )
        exc = RequestValidationError([{"type": "missing", "loc": ("query", "limit"), "msg": "Field required", "input": None}])
        response = Response()

        result = await handler.resolve_exception(_request(), response, exc)

        framework_defaults.resolve.assert_not_awaited()
        self.assertIs(result, response)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(json.loads(response.body)["code"], "MISSING_PARAMETER")

    async def test_without_forced_rules_framework_validation_default_applies(self) -> None:
        handler = RestExceptionHandler(
            error_resolver=build_default_error_resolver(Settings()),
            serializers=(JsonSerializer(),),
            settings=Settings(),
            forced_rules=(),
        )
        exc = RequestValidationError([{"type": "missing", "loc": ("query", "limit"), "msg": "Field required", "input": None}])

        result = await handler.resolve_exception(_request(), Response(), exc)

        self.assertEqual(result.status_code, 422)
        self.assertEqual(json.loads(result.body)["detail"][0]["loc"], ["query", "limit"])

    async def test_unknown_failures_fall_back_to_resolver(self) -> None:
        resolver = _StaticResolver(_not_found())
        handler = RestExceptionHandler(error_resolver=resolver, serializers=(JsonSerializer(),), settings=Settings())
        exc = ApiError(status_code=404, code="RESOURCE_NOT_FOUND", message="Resource not found")

        result = await handler.resolve_exception(_request(), Response(), exc)

        self.assertEqual(resolver.seen, [exc])
        self.assertEqual(result.status_code, 404)


if __name__ == "__main__":
    unittest.main()
