"""JSON error body serializer."""

from __future__ import annotations

from collections.abc import Mapping
import dataclasses
import json
from typing import Any

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

from rest_errors.adapters.serializers.base import MessageSerializer
from rest_errors.domain.media_type import APPLICATION_JSON, APPLICATION_WILDCARD_JSON, MediaType
from rest_errors.errors import MessageNotWritableError
from rest_errors.schemas.error import ErrorResponse


class JsonSerializer(MessageSerializer):
    """Encodes models, mappings, sequences and dataclasses as compact UTF-8 JSON.

    ``ErrorResponse`` bodies drop unset optional fields; every other body is
    written exactly as the application shaped it.
    """

    supported_media_types = (APPLICATION_JSON, APPLICATION_WILDCARD_JSON)

    def supports(self, body_type: type) -> bool:
        return issubclass(body_type, (BaseModel, Mapping, list, tuple)) or dataclasses.is_dataclass(body_type)

    def content_type_for(self, media_type: MediaType) -> MediaType:
        # Output is always UTF-8; a requested charset is never echoed back.
        content_type = super().content_type_for(media_type)
        parameters = tuple((name, value) for name, value in content_type.parameters if name != "charset")
        return MediaType(content_type.type, content_type.subtype, parameters)

    def encode(self, body: Any, media_type: MediaType) -> bytes:
        try:
            content = jsonable_encoder(body, exclude_none=isinstance(body, ErrorResponse))
            rendered = json.dumps(content, ensure_ascii=False, allow_nan=False, separators=(",", ":"))
        except (TypeError, ValueError, RecursionError) as exc:
            raise MessageNotWritableError(f"Could not write {type(body).__name__} as {media_type}: {exc}") from exc
        return rendered.encode("utf-8")


__all__ = ["JsonSerializer"]
