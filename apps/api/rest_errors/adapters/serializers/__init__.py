"""Error body serializers."""

from .base import MessageSerializer
from .json_serializer import JsonSerializer
from .text_serializer import PlainTextSerializer

__all__ = ["JsonSerializer", "MessageSerializer", "PlainTextSerializer"]
