"""
Tests for the httpx API client

Requests are answered by an in-process handler; no server is started.
"""

import json

import httpx
import pytest

from docflow.client import ApiError, ApiSession, DocFlowClient

USER = {"id": 1, "email": "ada@example.com"}


def _handler(request: httpx.Request) -> httpx.Response:
    auth = request.headers.get("Authorization")

    if request.url.path == "/auth/login":
        body = json.loads(request.content)
        if body["password"] != "right-password":
            return httpx.Response(
                401,
                json={"error": {"status_code": 401, "message": "Invalid credentials", "error_code": "AUTH_INVALID_CREDENTIALS"}},
            )
        return httpx.Response(200, json={"access_token": f"token-for-{body['email']}", "token_type": "bearer", "user": USER})

    if request.url.path == "/auth/profile":
        if auth is None:
            return httpx.Response(401, json={"error": {"message": "Not authenticated", "error_code": "AUTH_FAILED"}})
        return httpx.Response(200, json={"seen_auth": auth})

    if request.url.path == "/documents" and request.method == "GET":
        return httpx.Response(200, json={"auth": auth, "query": dict(request.url.params)})

    if request.url.path.startswith("/documents/") and request.method == "DELETE":
        return httpx.Response(204)

    if request.url.path == "/documents/organization/7" and request.method == "POST":
        return httpx.Response(201, json={"organization_id": 7, **json.loads(request.content)})

    if request.url.path == "/broken":
        return httpx.Response(502, text="Bad gateway")

    return httpx.Response(404, json={"detail": "Not Found"})


@pytest.fixture
async def api():
    client = DocFlowClient("http://api.test", transport=httpx.MockTransport(_handler))
    yield client
    await client.aclose()


class TestSessions:
    async def test_login_returns_session(self, api):
        session = await api.login("ada@example.com", "right-password")
        assert isinstance(session, ApiSession)
        assert session.token == "token-for-ada@example.com"
        assert session.user == USER

    async def test_session_is_sent_per_call(self, api):
        alice = ApiSession(token="alice")
        bob = ApiSession(token="bob")
        assert (await api.get_profile(alice))["seen_auth"] == "Bearer alice"
        assert (await api.get_profile(bob))["seen_auth"] == "Bearer bob"

    async def test_client_keeps_no_token(self, api):
        await api.login("ada@example.com", "right-password")
        data = await api.get_documents()
        assert data["auth"] is None

    async def test_pagination_params(self, api):
        data = await api.get_documents(ApiSession("t"), page=2, limit=5)
        assert data["query"] == {"page": "2", "limit": "5"}


class TestErrors:
    async def test_error_envelope_decoded(self, api):
        with pytest.raises(ApiError) as exc_info:
            await api.login("ada@example.com", "wrong")
        error = exc_info.value
        assert error.status_code == 401
        assert error.message == "Invalid credentials"
        assert error.error_code == "AUTH_INVALID_CREDENTIALS"

    async def test_plain_detail_decoded(self, api):
        with pytest.raises(ApiError) as exc_info:
            await api.get_document(1)
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Not Found"
        assert exc_info.value.error_code is None

    async def test_non_json_error(self, api):
        with pytest.raises(ApiError) as exc_info:
            await api._request("GET", "/broken")
        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Bad gateway"


class TestDocuments:
    async def test_delete_returns_none(self, api):
        assert await api.delete_document(ApiSession("t"), 3) is None

    async def test_create_in_organization(self, api):
        data = await api.create_document(ApiSession("t"), {"title": "Doc", "content": "x"}, organization_id=7)
        assert data == {"organization_id": 7, "title": "Doc", "content": "x"}
