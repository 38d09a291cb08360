"""Include-dispatch detection.

An include dispatch is a nested rendering pass whose output is embedded in an
outer response. It must not change the status code of that outer response.
"""

from starlette.requests import Request

INCLUDE_REQUEST_URI_ATTRIBUTE = "include_request_uri"


def mark_include_request(request: Request, uri: str) -> None:
    setattr(request.state, INCLUDE_REQUEST_URI_ATTRIBUTE, uri)


def is_include_request(request: Request) -> bool:
    return getattr(request.state, INCLUDE_REQUEST_URI_ATTRIBUTE, None) is not None
