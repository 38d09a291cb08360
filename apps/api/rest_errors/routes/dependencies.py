"""Dependency wiring for routes."""

from fastapi import Request

from rest_errors.repositories.memory import InMemoryStore


def get_store(request: Request) -> InMemoryStore:
    return request.app.state.store
