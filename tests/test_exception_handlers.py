"""Tests for global exception handlers.

Every error leaves the API as ``{"error": "..."}`` with the right status
and without internal details.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from contact_api.core.errors import (
    AppError,
    PersistenceAppError,
    SubmissionValidationError,
    ValidationAppError,
)
from contact_api.core.exception_handlers import (
    UNEXPECTED_ERROR_MESSAGE,
    general_exception_handler,
    setup_exception_handlers,
)


@pytest.fixture
def app_with_handlers() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers, raise_server_exceptions=False)


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    def test_validation_error_returns_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-validation")
        async def test_endpoint():
            raise ValidationAppError(code="test_validation", message="Test validation error")

        response = client.get("/test-validation")

        assert response.status_code == 400
        assert response.json() == {"error": "Test validation error"}

    def test_submission_validation_error_keeps_joined_message(
        self, client: TestClient, app_with_handlers: FastAPI
    ):
        @app_with_handlers.get("/test-submission")
        async def test_endpoint():
            raise SubmissionValidationError(
                code="submission_invalid",
                message="Name must be at least 2 characters, Please enter a valid email address",
                errors=["Name must be at least 2 characters", "Please enter a valid email address"],
            )

        response = client.get("/test-submission")

        assert response.status_code == 400
        assert response.json()["error"].startswith("Name must be at least 2 characters")

    def test_persistence_error_hides_details(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-persistence")
        async def test_endpoint():
            raise PersistenceAppError(
                code="persistence_insert_failed",
                message="Failed to save message. Please try again.",
                details={"backend_error": "relation contacts does not exist"},
            )

        response = client.get("/test-persistence")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to save message. Please try again."}
        assert "relation" not in response.text


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_unexpected_exception_returns_generic_500(
        self, client: TestClient, app_with_handlers: FastAPI
    ):
        @app_with_handlers.get("/test-crash")
        async def test_endpoint():
            raise RuntimeError("database connection failed at 10.0.0.3")

        response = client.get("/test-crash")

        assert response.status_code == 500
        assert response.json() == {"error": UNEXPECTED_ERROR_MESSAGE}

    def test_general_exception_handler_never_leaks_stack_trace(self):
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        exc = ValueError("Test error with details")
        response = asyncio.run(general_exception_handler(request, exc))

        response_text = bytes(response.body).decode()
        assert response.status_code == 500
        assert json.loads(response_text) == {"error": UNEXPECTED_ERROR_MESSAGE}
        assert "Traceback" not in response_text
        assert "ValueError" not in response_text


class TestErrorHandlerIntegration:
    def test_setup_exception_handlers_registers_handlers(self, app_with_handlers: FastAPI):
        assert AppError in app_with_handlers.exception_handlers
        assert Exception in app_with_handlers.exception_handlers

    def test_multiple_handler_setups_does_not_fail(self):
        app = FastAPI()

        setup_exception_handlers(app)
        setup_exception_handlers(app)

        assert AppError in app.exception_handlers


def test_app_error_str_is_message() -> None:
    error = ValidationAppError(code="x", message="readable")

    assert str(error) == "readable"
