"""
Tests for error responses and model helpers.
"""
from datetime import datetime, timezone

import pytest
from fastapi import FastAPI, HTTPException
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel

from launchline.core.exceptions import (
    AmbiguousWorkspaceException,
    ConflictException,
    InvitationEmailInUseException,
    InvitationExpiredException,
    InvitationInvalidStateException,
    create_error_response,
    setup_exception_handlers,
)
from launchline.core.middleware import LoggingMiddleware
from launchline.modules.workspace.models import Workspace


class Payload(BaseModel):
    name: str


@pytest.fixture
def error_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(LoggingMiddleware)
    setup_exception_handlers(app)

    @app.get("/conflict")
    async def conflict():
        raise ConflictException("Membership already exists", details={"user_id": "user-1"})

    @app.get("/http")
    async def http_error():
        raise HTTPException(status_code=418, detail="teapot")

    @app.post("/validate")
    async def validate(payload: Payload):
        return payload

    return app


@pytest.fixture
async def error_client(error_app):
    async with AsyncClient(transport=ASGITransport(app=error_app), base_url="http://testserver") as ac:
        yield ac


class TestErrorResponses:

    def test_create_error_response_omits_empty_fields(self):
        body = create_error_response("Nope", "SOME_ERROR")

        assert set(body["error"]) == {"message", "code", "timestamp"}

    async def test_api_exception_is_rendered_with_request_id(self, error_client):
        response = await error_client.get("/conflict", headers={"X-Request-ID": "req-9"})

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "RESOURCE_CONFLICT"
        assert error["details"] == {"user_id": "user-1"}
        assert error["request_id"] == "req-9"

    async def test_http_exception(self, error_client):
        response = await error_client.get("/http")

        assert response.status_code == 418
        assert response.json()["error"]["code"] == "HTTP_ERROR"
        assert response.json()["error"]["message"] == "teapot"

    async def test_validation_error_lists_fields(self, error_client):
        response = await error_client.post("/validate", json={})

        assert response.status_code == 422
        errors = response.json()["error"]["details"]["errors"]
        assert errors[0]["field"] == "body -> name"


class TestDomainExceptions:

    def test_invalid_state_family(self):
        assert isinstance(InvitationExpiredException(), InvitationInvalidStateException)
        assert InvitationExpiredException().status_code == 400

    def test_email_in_use_is_a_conflict(self):
        exc = InvitationEmailInUseException("ada@acme.com")

        assert exc.status_code == 409
        assert exc.details == {"email": "ada@acme.com"}

    def test_ambiguous_workspace_shares_not_found_status(self):
        exc = AmbiguousWorkspaceException("user-1", 3)

        assert exc.status_code == 404
        assert exc.error_code == "WORKSPACE_AMBIGUOUS"


class TestModelHelpers:

    def test_to_dict_includes_columns(self):
        now = datetime(2026, 3, 2, tzinfo=timezone.utc)
        workspace = Workspace(id="ws-1", name="Acme", created_at=now, updated_at=now)

        data = workspace.to_dict()

        assert data["id"] == "ws-1"
        assert data["name"] == "Acme"
        assert data["deactivated_at"] is None
        assert "Workspace" in repr(workspace)
