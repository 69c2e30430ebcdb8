"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment variables are set here, before any import that builds settings,
so tests never pick up a developer's .env file or a real Supabase project.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"

for _var in ("SUPABASE_URL", "SUPABASE_ANON_KEY", "SUPABASE_SERVICE_ROLE_KEY"):
    os.environ.pop(_var, None)

os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("APP_RATE_LIMIT_REQUESTS", "5")
os.environ.setdefault("APP_RATE_LIMIT_WINDOW_SECONDS", "3600")
os.environ.setdefault("LOG_FORMAT", "json")

import itertools
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from contact_api.adapters.persistence.base import AbstractContactGateway
from contact_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from contact_api.core.app_factory import create_app
from contact_api.core.errors import PersistenceAppError
from contact_api.schemas.contact import ContactSubmission, StoredContact


class FakeClock:
    """Deterministic clock for window expiry tests."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class InMemoryContactGateway(AbstractContactGateway):
    """Durable-looking gateway backed by a dict, for tests only."""

    name = "in_memory"
    durable = True

    def __init__(self) -> None:
        self.rows: dict[str, dict[str, Any]] = {}
        self._ids = itertools.count(1)

    async def save(self, submission: ContactSubmission) -> StoredContact | None:
        record_id = str(next(self._ids))
        row = {"id": record_id, **submission.model_dump(), "read": False}
        self.rows[record_id] = row
        return StoredContact.model_validate(row)

    async def fetch(self, record_id: str | int) -> StoredContact | None:
        row = self.rows.get(str(record_id))
        return StoredContact.model_validate(row) if row else None


class FailingContactGateway(AbstractContactGateway):
    """Gateway whose backend is always unreachable."""

    name = "failing"
    durable = True

    def __init__(self, backend_error: str = "connection refused: db.internal:5432") -> None:
        self.backend_error = backend_error

    async def save(self, submission: ContactSubmission) -> StoredContact | None:
        raise PersistenceAppError(
            code="persistence_insert_failed",
            message="Failed to save message. Please try again.",
            details={"backend_error": self.backend_error},
        )

    async def fetch(self, record_id: str | int) -> StoredContact | None:
        return None


@pytest.fixture
def valid_payload() -> dict[str, str]:
    return {
        "name": "Jo",
        "email": "jo@x.com",
        "subject": "Hello there",
        "message": "This is a test message.",
    }


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(fake_clock: FakeClock) -> InMemoryFixedWindowRateLimiter:
    return InMemoryFixedWindowRateLimiter(limit=5, window_seconds=3600, clock=fake_clock)


@pytest.fixture
def memory_gateway() -> InMemoryContactGateway:
    return InMemoryContactGateway()


@pytest.fixture
def app_factory(monkeypatch: pytest.MonkeyPatch, limiter: InMemoryFixedWindowRateLimiter):
    """Build an app around a given gateway with a fresh, clock-driven limiter."""
    from contact_api.api.routes import contact as contact_module

    monkeypatch.setattr(contact_module, "get_rate_limiter", lambda: limiter)
    # Root logging is configured once by contact_api.main; keep pytest capture intact
    monkeypatch.setattr("contact_api.core.app_factory.configure_logging", lambda *_: None)

    def _build(gateway: AbstractContactGateway | None = None) -> FastAPI:
        return create_app(gateway=gateway)

    return _build


@pytest.fixture
def client(app_factory, memory_gateway: InMemoryContactGateway) -> TestClient:
    return TestClient(app_factory(memory_gateway))


@pytest.fixture
def failing_gateway() -> FailingContactGateway:
    return FailingContactGateway()
