"""
DocFlow API client.

Thin async wrapper over httpx. Authentication state is never kept on the
client: ``register`` and ``login`` return an :class:`ApiSession`, and every
authenticated call takes the session it should act as. Several sessions can
share one client.

    async with DocFlowClient("https://api.example.com") as client:
        session = await client.login("ada@example.com", "s3cret-pass")
        doc = await client.create_document(session, {"title": "Intro", "content": "# Hi"})
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class ApiSession:
    """Credentials of one signed-in user."""

    token: str
    user: dict[str, Any] = field(default_factory=dict)

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


class ApiError(Exception):
    """Non-2xx response from the API, decoded from the error envelope when present."""

    def __init__(self, status_code: int, message: str, error_code: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        self.error_code = error_code
        super().__init__(f"{status_code}: {message}")

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            body = response.json()
        except ValueError:
            return cls(response.status_code, response.text or f"HTTP {response.status_code}")

        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            return cls(response.status_code, error.get("message", ""), error.get("error_code"))
        if isinstance(body, dict) and "detail" in body:
            return cls(response.status_code, str(body["detail"]))
        return cls(response.status_code, f"HTTP {response.status_code}")


class DocFlowClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "DocFlowClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        session: Optional[ApiSession] = None,
        **kwargs: Any,
    ) -> Any:
        headers = session.headers if session else {}
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"API request failed: {method} {path}: {e}")
            raise

        if response.is_error:
            error = ApiError.from_response(response)
            logger.warning(f"API error: {method} {path} -> {error}")
            raise error

        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return None
        return response.json()

    # ── Authentication ────────────────────────────────────────────────────────

    async def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        company: Optional[str] = None,
    ) -> ApiSession:
        payload = {"first_name": first_name, "last_name": last_name, "email": email, "password": password}
        if company:
            payload["company"] = company
        data = await self._request("POST", "/auth/register", json=payload)
        return ApiSession(token=data["access_token"], user=data["user"])

    async def login(self, email: str, password: str) -> ApiSession:
        data = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        return ApiSession(token=data["access_token"], user=data["user"])

    async def get_profile(self, session: ApiSession) -> dict[str, Any]:
        return await self._request("GET", "/auth/profile", session)

    # ── Documents ─────────────────────────────────────────────────────────────

    async def get_documents(
        self,
        session: Optional[ApiSession] = None,
        page: int = 1,
        limit: int = 10,
    ) -> dict[str, Any]:
        return await self._request("GET", "/documents", session, params={"page": page, "limit": limit})

    async def get_document(self, document_id: int, session: Optional[ApiSession] = None) -> dict[str, Any]:
        return await self._request("GET", f"/documents/{document_id}", session)

    async def get_document_by_slug(self, slug: str, session: Optional[ApiSession] = None) -> dict[str, Any]:
        return await self._request("GET", f"/documents/slug/{slug}", session)

    async def get_my_documents(self, session: ApiSession, page: int = 1, limit: int = 10) -> dict[str, Any]:
        return await self._request(
            "GET", "/documents/my/documents", session, params={"page": page, "limit": limit}
        )

    async def create_document(
        self,
        session: ApiSession,
        data: dict[str, Any],
        organization_id: Optional[int] = None,
    ) -> dict[str, Any]:
        path = "/documents" if organization_id is None else f"/documents/organization/{organization_id}"
        return await self._request("POST", path, session, json=data)

    async def update_document(self, session: ApiSession, document_id: int, data: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PUT", f"/documents/{document_id}", session, json=data)

    async def delete_document(self, session: ApiSession, document_id: int) -> None:
        await self._request("DELETE", f"/documents/{document_id}", session)

    # ── Organizations ─────────────────────────────────────────────────────────

    async def create_organization(self, session: ApiSession, data: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/organizations", session, json=data)

    async def get_organizations(self, session: ApiSession) -> list[dict[str, Any]]:
        return await self._request("GET", "/organizations", session)

    async def get_public_content(self, subdomain: str) -> dict[str, Any]:
        return await self._request("GET", f"/organizations/public/subdomain/{subdomain}")

    async def add_member(
        self,
        session: ApiSession,
        organization_id: int,
        user_id: int,
        role: str = "viewer",
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/organizations/{organization_id}/members",
            session,
            json={"user_id": user_id, "role": role},
        )

    async def health_check(self) -> dict[str, Any]:
        return await self._request("GET", "/health")
