"""
Tests for the exception hierarchy and the global error envelope
"""

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel

from docflow.exception_handlers import create_error_response, get_error_type, register_exception_handlers
from docflow.exceptions import (
    AuthorizationError,
    ConflictError,
    DocFlowError,
    DocumentNotFoundError,
    DuplicateResourceError,
    ErrorCode,
    InvalidCredentialsError,
    InvalidSubdomainError,
    InvalidTokenError,
    MembershipNotFoundError,
    OrganizationNotFoundError,
    ResourceNotFoundError,
    UserNotFoundError,
)


class TestExceptionClasses:
    @pytest.mark.parametrize(
        "exc,status_code,error_code",
        [
            (UserNotFoundError(1), 404, ErrorCode.RESOURCE_USER_NOT_FOUND),
            (OrganizationNotFoundError("acme"), 404, ErrorCode.RESOURCE_ORGANIZATION_NOT_FOUND),
            (DocumentNotFoundError(5), 404, ErrorCode.RESOURCE_DOCUMENT_NOT_FOUND),
            (MembershipNotFoundError(9), 404, ErrorCode.RESOURCE_MEMBERSHIP_NOT_FOUND),
            (AuthorizationError(), 403, ErrorCode.AUTH_PERMISSION_DENIED),
            (DuplicateResourceError("User", "email", "a@b.c"), 409, ErrorCode.VALIDATION_DUPLICATE_RESOURCE),
            (InvalidSubdomainError("www"), 409, ErrorCode.VALIDATION_INVALID_SUBDOMAIN),
            (InvalidCredentialsError(), 401, ErrorCode.AUTH_INVALID_CREDENTIALS),
            (InvalidTokenError(), 401, ErrorCode.AUTH_INVALID_TOKEN),
        ],
    )
    def test_status_and_error_codes(self, exc, status_code, error_code):
        assert isinstance(exc, DocFlowError)
        assert exc.status_code == status_code
        assert exc.error_code == error_code

    def test_not_found_message_and_details(self):
        exc = DocumentNotFoundError(123)
        assert isinstance(exc, ResourceNotFoundError)
        assert exc.message == "Document with id '123' not found"
        assert exc.details == {"resource_type": "Document", "resource_id": 123}

    def test_not_found_without_id(self):
        assert UserNotFoundError().message == "User not found"

    def test_conflict_family(self):
        assert isinstance(DuplicateResourceError("Membership", "user_id", 3), ConflictError)
        assert isinstance(InvalidSubdomainError("x"), ConflictError)
        assert DuplicateResourceError("User", "email", "a@b.c").message == "User with email 'a@b.c' already exists"

    def test_authorization_required_roles(self):
        exc = AuthorizationError("nope", required_roles=["owner", "admin"])
        assert exc.details == {"required_roles": ["owner", "admin"]}
        assert AuthorizationError().details == {}


class _Payload(BaseModel):
    title: str


@pytest.fixture
def error_app():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/missing")
    async def missing():
        raise DocumentNotFoundError(42)

    @app.get("/forbidden")
    async def forbidden():
        raise AuthorizationError("Insufficient permissions in organization", required_roles=["owner"])

    @app.get("/unauthenticated")
    async def unauthenticated():
        raise InvalidTokenError()

    @app.get("/http")
    async def http_error():
        raise HTTPException(status_code=404, detail="Nothing here")

    @app.post("/validate")
    async def validate(payload: _Payload):
        return payload

    return TestClient(app)


class TestHandlers:
    def test_docflow_error_envelope(self, error_app):
        response = error_app.get("/missing")
        assert response.status_code == 404
        error = response.json()["error"]
        assert error["error_code"] == "RESOURCE_DOCUMENT_NOT_FOUND"
        assert error["type"] == "Not Found"
        assert error["path"] == "/missing"
        assert error["details"]["resource_id"] == 42

    def test_forbidden_envelope(self, error_app):
        error = error_app.get("/forbidden").json()["error"]
        assert error["status_code"] == 403
        assert error["message"] == "Insufficient permissions in organization"
        assert error["details"] == {"required_roles": ["owner"]}

    def test_unauthenticated_sets_www_authenticate(self, error_app):
        response = error_app.get("/unauthenticated")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_http_exception_envelope(self, error_app):
        response = error_app.get("/http")
        assert response.status_code == 404
        assert response.json()["error"]["error_code"] == "RESOURCE_NOT_FOUND"
        assert response.json()["error"]["message"] == "Nothing here"

    def test_validation_envelope(self, error_app):
        response = error_app.post("/validate", json={})
        assert response.status_code == 422
        error = response.json()["error"]
        assert error["error_code"] == "VALIDATION_FAILED"
        assert error["details"]["validation_errors"][0]["field"] == "title"


class TestHelpers:
    def test_error_type_fallback(self):
        assert get_error_type(409) == "Conflict"
        assert get_error_type(418) == "Error"

    def test_create_error_response_omits_empty_parts(self):
        response = create_error_response(400, "bad")
        assert response.status_code == 400
        assert b'"details"' not in response.body
        assert b'"error_code"' not in response.body
