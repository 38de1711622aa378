"""
Tests for the organization public site served on subdomain hosts
"""

from docflow.models import DocumentStatus


async def _seed(make_organization, make_document, owner, is_public=True):
    organization = await make_organization(owner, is_public=is_public)
    await make_document(
        owner, title="Install Guide", status=DocumentStatus.PUBLISHED, is_public=True, organization_id=organization.id
    )
    await make_document(owner, title="Roadmap", status=DocumentStatus.DRAFT, is_public=True, organization_id=organization.id)
    return organization


class TestPublicSite:
    async def test_subdomain_home(self, client, test_user, make_organization, make_document):
        await _seed(make_organization, make_document, test_user)
        response = await client.get("/", headers={"host": "acme.example.com"})
        assert response.status_code == 200
        data = response.json()
        assert data["organization"]["name"] == "Acme Corp"
        assert [d["slug"] for d in data["documents"]] == ["install-guide"]

    async def test_subdomain_host_is_case_insensitive(self, client, test_user, make_organization, make_document):
        await _seed(make_organization, make_document, test_user)
        response = await client.get("/", headers={"host": "ACME.example.com"})
        assert response.status_code == 200

    async def test_subdomain_document(self, client, test_user, make_organization, make_document):
        await _seed(make_organization, make_document, test_user)
        response = await client.get("/docs/install-guide", headers={"host": "acme.example.com"})
        assert response.status_code == 200
        assert response.json()["document"]["title"] == "Install Guide"
        assert "author_id" not in response.json()["document"]

    async def test_unpublished_document_hidden(self, client, test_user, make_organization, make_document):
        await _seed(make_organization, make_document, test_user)
        response = await client.get("/docs/roadmap", headers={"host": "acme.example.com"})
        assert response.status_code == 404

    async def test_main_domain_has_no_public_site(self, client):
        assert (await client.get("/", headers={"host": "example.com"})).status_code == 404
        assert (await client.get("/", headers={"host": "www.example.com"})).status_code == 404

    async def test_private_organization_hidden(self, client, test_user, make_organization, make_document):
        await _seed(make_organization, make_document, test_user, is_public=False)
        response = await client.get("/", headers={"host": "acme.example.com"})
        assert response.status_code == 404

    async def test_reserved_registration_name_still_routes(self, client):
        """docs.acme.example.com resolves to "docs", which has no organization"""
        response = await client.get("/", headers={"host": "docs.acme.example.com"})
        assert response.status_code == 404
        assert response.json()["error"]["error_code"] == "RESOURCE_ORGANIZATION_NOT_FOUND"


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    async def test_request_id_echoed(self, client):
        response = await client.get("/documents", headers={"X-Request-ID": "abc-123"})
        assert response.headers["x-request-id"] == "abc-123"
