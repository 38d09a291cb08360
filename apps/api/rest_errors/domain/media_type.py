"""Media type parsing and ``Accept`` header negotiation rules."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cmp_to_key

_WILDCARD = "*"
_QUALITY_PARAMETER = "q"


@dataclass(frozen=True, slots=True)
class MediaType:
    type: str
    subtype: str
    parameters: tuple[tuple[str, str], ...] = ()

    @property
    def quality(self) -> float:
        for name, value in self.parameters:
            if name == _QUALITY_PARAMETER:
                return float(value)
        return 1.0

    @property
    def is_wildcard_type(self) -> bool:
        return self.type == _WILDCARD

    @property
    def is_wildcard_subtype(self) -> bool:
        return self.subtype == _WILDCARD or self.subtype.startswith("*+")

    @property
    def subtype_suffix(self) -> str | None:
        _, plus, suffix = self.subtype.rpartition("+")
        return suffix if plus else None

    def without_quality(self) -> MediaType:
        parameters = tuple((name, value) for name, value in self.parameters if name != _QUALITY_PARAMETER)
        return MediaType(self.type, self.subtype, parameters)

    def is_compatible_with(self, other: MediaType) -> bool:
        """Symmetric match: either side may carry wildcards."""
        if self.is_wildcard_type or other.is_wildcard_type:
            return True
        if self.type != other.type:
            return False
        if self.subtype == other.subtype:
            return True
        if not (self.is_wildcard_subtype or other.is_wildcard_subtype):
            return False
        if self.subtype == _WILDCARD or other.subtype == _WILDCARD:
            return True
        this_suffix = self.subtype_suffix
        other_suffix = other.subtype_suffix
        if self.is_wildcard_subtype and this_suffix is not None:
            return this_suffix == other.subtype or this_suffix == other_suffix
        if other.is_wildcard_subtype and other_suffix is not None:
            return self.subtype == other_suffix or other_suffix == this_suffix
        return False

    def __str__(self) -> str:
        rendered = f"{self.type}/{self.subtype}"
        for name, value in self.parameters:
            rendered += f";{name}={value}"
        return rendered


ALL = MediaType(_WILDCARD, _WILDCARD)
APPLICATION_JSON = MediaType("application", "json")
APPLICATION_WILDCARD_JSON = MediaType("application", "*+json")
TEXT_PLAIN = MediaType("text", "plain")


def parse_media_type(value: str) -> MediaType:
    """Parse a single media range such as ``application/json;q=0.8``."""
    head, *raw_parameters = value.split(";")
    full_type = head.strip().lower()
    if full_type == _WILDCARD:
        full_type = "*/*"
    main_type, slash, subtype = full_type.partition("/")
    if not slash or not main_type or not subtype or "/" in subtype:
        raise ValueError(f"Invalid media type {value!r}")
    if main_type == _WILDCARD and subtype != _WILDCARD:
        raise ValueError(f"Wildcard type is legal only in '*/*': {value!r}")

    parameters: list[tuple[str, str]] = []
    for raw in raw_parameters:
        name, equals, parameter_value = raw.partition("=")
        name = name.strip().lower()
        if not name:
            continue
        if not equals:
            raise ValueError(f"Invalid parameter {raw!r} in media type {value!r}")
        parameter_value = parameter_value.strip().strip('"')
        if name == _QUALITY_PARAMETER:
            quality = float(parameter_value)
            if not 0.0 <= quality <= 1.0:
                raise ValueError(f"Invalid quality value {parameter_value!r} in media type {value!r}")
        parameters.append((name, parameter_value))
    return MediaType(main_type, subtype, tuple(parameters))


def parse_accept(header: str | None) -> list[MediaType]:
    """Parse an ``Accept`` header, skipping malformed and ``q=0`` ranges.

    Returns an empty list when the header is absent or holds nothing usable.
    """
    if not header:
        return []
    accepted: list[MediaType] = []
    for item in header.split(","):
        if not item.strip():
            continue
        try:
            media_type = parse_media_type(item)
        except ValueError:
            continue
        if media_type.quality <= 0.0:
            continue
        accepted.append(media_type)
    return accepted


def _compare_quality(left: MediaType, right: MediaType) -> int:
    if left.quality != right.quality:
        return -1 if left.quality > right.quality else 1
    if left.is_wildcard_type != right.is_wildcard_type:
        return 1 if left.is_wildcard_type else -1
    if left.type != right.type:
        return 0
    if left.is_wildcard_subtype != right.is_wildcard_subtype:
        return 1 if left.is_wildcard_subtype else -1
    if left.subtype != right.subtype:
        return 0
    left_params = len(left.without_quality().parameters)
    right_params = len(right.without_quality().parameters)
    return right_params - left_params


def sort_by_quality_value(media_types: list[MediaType]) -> list[MediaType]:
    """Order by descending quality, then more specific ranges first; ties keep header order."""
    return sorted(media_types, key=cmp_to_key(_compare_quality))


def accepted_media_types(header: str | None) -> list[MediaType]:
    """Accepted types in preference order; ``*/*`` when the client stated nothing."""
    accepted = parse_accept(header)
    if not accepted:
        return [ALL]
    return sort_by_quality_value(accepted)
