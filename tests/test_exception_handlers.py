"""Tests for global exception handlers.

Validates that every error kind is rendered with its own status code, the
client-safe payload shape, and no information leakage.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pydantic
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from service_errors.adapters import from_cognito_error
from service_errors.core.errors import (
    BadRequestError,
    BaseError,
    InternalError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from service_errors.core.exception_handlers import general_exception_handler, setup_exception_handlers


class UpstreamAuthError(Exception):
    """Identity-provider error surfaced as an exception with SDK fields."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.name = code
        self.code = code
        self.message = message


class SlottedAuthError:
    """Upstream error object without a __dict__."""

    __slots__ = ("name", "message", "code")

    def __init__(self) -> None:
        self.name = "UserNotFoundException"
        self.message = "User does not exist."
        self.code = "UserNotFoundException"


class Profile(pydantic.BaseModel):
    email: str


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers and failing routes."""
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/not-found")
    async def not_found():
        raise NotFoundError(
            "User not found",
            details=[{"path": "id", "message": "No user with id 42"}],
        )

    @app.get("/internal")
    async def internal():
        raise InternalError("database password rejected")

    @app.get("/unavailable")
    async def unavailable():
        raise ServiceError("payments upstream timed out", expose=True)

    @app.get("/validation")
    async def validation():
        raise ValidationError("Invalid payload", details=[{"path": "", "message": "Expected object"}])

    @app.get("/query")
    async def query(limit: int):
        return {"limit": limit}

    @app.get("/cognito")
    async def cognito():
        raise UpstreamAuthError("NotAuthorizedException", "Incorrect username or password")

    @app.get("/missing-path")
    async def missing_path():
        raise NotFoundError("gone", details=[{"message": "no path key"}])

    @app.get("/numeric-message")
    async def numeric_message():
        raise BadRequestError("bad", details=[{"path": "a", "message": 5}])

    @app.get("/slotted")
    async def slotted():
        raise from_cognito_error(SlottedAuthError())

    @app.get("/model-bug")
    async def model_bug():
        return Profile.model_validate({"email": None})

    @app.get("/crash")
    async def crash():
        raise RuntimeError("Unexpected error: database connection failed")

    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    """Create test client; unhandled errors are rendered instead of re-raised."""
    return TestClient(app_with_handlers, raise_server_exceptions=False)


class TestAppErrorHandler:
    """Test handler for BaseError and subclasses."""

    def test_client_error_uses_kind_status(self, client: TestClient):
        response = client.get("/not-found")

        assert response.status_code == 404
        assert response.json() == {
            "status": 404,
            "type": "notfound",
            "message": "User not found",
            "details": [{"path": "id", "message": "No user with id 42"}],
        }

    def test_server_error_hides_message(self, client: TestClient):
        response = client.get("/internal")

        assert response.status_code == 500
        data = response.json()
        assert data["message"] == "Internal Server Error"
        assert data["type"] == "internal"
        assert data["errorId"]
        assert "password" not in response.text

    def test_service_error_never_exposed(self, client: TestClient):
        response = client.get("/unavailable")

        assert response.status_code == 503
        assert response.json()["message"] == "Service Unavailable"
        assert "timed out" not in response.text

    def test_validation_error_keeps_empty_path(self, client: TestClient):
        response = client.get("/validation")

        assert response.status_code == 422
        assert response.json()["details"] == [{"path": "", "message": "Expected object"}]

    def test_development_mode_adds_diagnostics(self, client: TestClient, development_mode):
        response = client.get("/not-found")

        data = response.json()
        assert "Traceback" in data["stack"]
        assert data["context"] == {}

    def test_details_without_path_are_rendered_as_given(self, client: TestClient):
        response = client.get("/missing-path")

        assert response.status_code == 404
        assert response.json()["details"] == [{"message": "no path key"}]

    def test_non_string_detail_message_keeps_status(self, client: TestClient):
        response = client.get("/numeric-message")

        assert response.status_code == 400
        assert response.json()["details"] == [{"path": "a", "message": 5}]

    def test_unserializable_context_is_stringified(self, client: TestClient, development_mode):
        response = client.get("/slotted")

        assert response.status_code == 404
        data = response.json()
        assert data["type"] == "notfound"
        assert isinstance(data["context"]["cognitoError"], str)

    def test_no_diagnostics_in_production(self, client: TestClient):
        data = client.get("/internal").json()

        assert "stack" not in data
        assert "context" not in data


class TestRequestValidationHandler:
    """FastAPI request validation is rendered as a ValidationError."""

    def test_missing_query_parameter(self, client: TestClient):
        response = client.get("/query")

        assert response.status_code == 422
        data = response.json()
        assert data["type"] == "validation"
        assert data["message"] == "Request validation failed"
        assert data["details"] == [{"path": "limit", "message": "Field required", "code": "missing"}]


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_upstream_errors_keep_classification(self, client: TestClient):
        response = client.get("/cognito")

        assert response.status_code == 401
        assert response.json()["message"] == "Incorrect username or password"

    def test_unexpected_exception_is_generic_500(self, client: TestClient):
        response = client.get("/crash")

        assert response.status_code == 500
        data = response.json()
        assert data["type"] == "internal"
        assert data["message"] == "Internal Server Error"
        assert "database connection" not in response.text

    def test_model_validation_inside_handler_is_hidden(self, client: TestClient):
        response = client.get("/model-bug")

        assert response.status_code == 500
        data = response.json()
        assert data["type"] == "internal"
        assert "details" not in data
        assert "email" not in response.text

    def test_general_exception_handler_never_leaks_stack_trace(self):
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        exc = ValueError("Test error with details")
        response = asyncio.run(general_exception_handler(request, exc))

        response_text = bytes(response.body).decode()
        data = json.loads(response_text)
        assert response.status_code == 500
        assert data["errorId"]
        assert "Traceback" not in response_text
        assert "ValueError" not in response_text


class TestErrorHandlerIntegration:
    """Integration tests for exception handler setup."""

    def test_setup_exception_handlers_registers_handlers(self, app_with_handlers: FastAPI):
        assert BaseError in app_with_handlers.exception_handlers
        assert Exception in app_with_handlers.exception_handlers

    def test_multiple_handler_setups_does_not_fail(self):
        app = FastAPI()

        setup_exception_handlers(app)
        setup_exception_handlers(app)

        assert BaseError in app.exception_handlers
