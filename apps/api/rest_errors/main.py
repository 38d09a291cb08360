"""Reference FastAPI application wired with the error handler."""

from __future__ import annotations

from fastapi import FastAPI

from rest_errors.adapters.serializers import JsonSerializer, PlainTextSerializer
from rest_errors.core.config import Settings, get_settings
from rest_errors.repositories.memory import InMemoryStore
from rest_errors.resolvers import build_default_error_resolver
from rest_errors.routes import items_router
from rest_errors.services.exception_handler import RestExceptionHandler, install_exception_handler


def build_exception_handler(settings: Settings) -> RestExceptionHandler:
    return RestExceptionHandler(
        error_resolver=build_default_error_resolver(settings),
        serializers=(JsonSerializer(), PlainTextSerializer()),
        settings=settings,
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="rest-errors reference API", version="0.1.0")
    app.state.store = InMemoryStore()
    app.state.exception_handler = build_exception_handler(settings)
    install_exception_handler(app, app.state.exception_handler)

    app.include_router(items_router, prefix="/api/v1")
    return app


app = create_app()
