"""Utilities for safe structured logging fields."""

from __future__ import annotations

import hashlib
from typing import Any
from uuid import uuid4

from starlette.requests import Request


def safe_log_identifier(value: Any, *, prefix: str) -> str:
    """Return a deterministic non-reversible token for log correlation fields."""
    text = str(value or "").strip()
    if not text:
        return f"{prefix}-missing"

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
    return f"{prefix}-{digest}"


def request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        request.state.correlation_id = correlation_id
        return correlation_id

    generated = f"req-{uuid4()}"
    request.state.correlation_id = generated
    return generated


def endpoint_name(request: Request) -> str:
    """Name of the endpoint that was handling the request, if routing got that far."""
    endpoint = request.scope.get("endpoint")
    if endpoint is None:
        return "-"
    return getattr(endpoint, "__qualname__", None) or getattr(endpoint, "__name__", None) or type(endpoint).__name__
