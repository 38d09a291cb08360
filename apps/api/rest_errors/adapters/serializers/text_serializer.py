"""Plain-text error body serializer."""

from typing import Any

from rest_errors.adapters.serializers.base import MessageSerializer
from rest_errors.domain.media_type import TEXT_PLAIN, MediaType
from rest_errors.errors import MessageNotWritableError
from rest_errors.schemas.error import ErrorResponse


class PlainTextSerializer(MessageSerializer):
    """Renders ``ErrorResponse`` as ``CODE: message``; strings pass through."""

    supported_media_types = (TEXT_PLAIN,)
    charset = "utf-8"

    def supports(self, body_type: type) -> bool:
        return issubclass(body_type, (ErrorResponse, str))

    def encode(self, body: Any, media_type: MediaType) -> bytes:
        text = f"{body.code}: {body.message}" if isinstance(body, ErrorResponse) else body
        try:
            return text.encode(dict(media_type.parameters).get("charset", "utf-8"))
        except (LookupError, UnicodeEncodeError) as exc:
            raise MessageNotWritableError(f"Could not write text as {media_type}: {exc}") from exc


__all__ = ["PlainTextSerializer"]
