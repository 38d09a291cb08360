"""Serializer interface used for error body content negotiation."""

from abc import ABC, abstractmethod
from typing import Any

from starlette.responses import Response

from rest_errors.domain.media_type import MediaType


class MessageSerializer(ABC):
    """Writes values of supported types as one of its supported media types."""

    supported_media_types: tuple[MediaType, ...] = ()
    charset: str | None = None

    @property
    def default_media_type(self) -> MediaType:
        return self.supported_media_types[0]

    @abstractmethod
    def supports(self, body_type: type) -> bool:
        """Whether values of ``body_type`` can be encoded at all."""

    @abstractmethod
    def encode(self, body: Any, media_type: MediaType) -> bytes:
        """Encode ``body``; raise ``MessageNotWritableError`` when it cannot be written."""

    def can_write(self, body_type: type, media_type: MediaType) -> bool:
        if not self.supports(body_type):
            return False
        return any(supported.is_compatible_with(media_type) for supported in self.supported_media_types)

    def content_type_for(self, media_type: MediaType) -> MediaType:
        """Concrete type to announce; wildcard ranges fall back to the default."""
        if media_type.is_wildcard_type or media_type.is_wildcard_subtype:
            media_type = self.default_media_type
        media_type = media_type.without_quality()
        if self.charset and not any(name == "charset" for name, _ in media_type.parameters):
            media_type = MediaType(media_type.type, media_type.subtype, media_type.parameters + (("charset", self.charset),))
        return media_type

    def write(self, body: Any, media_type: MediaType, response: Response) -> None:
        content_type = self.content_type_for(media_type)
        data = self.encode(body, content_type)
        response.body = data
        response.headers["content-type"] = str(content_type)
        response.headers["content-length"] = str(len(data))


__all__ = ["MessageSerializer"]
