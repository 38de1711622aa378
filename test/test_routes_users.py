"""
Tests for global-admin user management routes
"""


class TestUserAdministration:
    async def test_non_admin_forbidden(self, client, test_user, headers_for):
        response = await client.get("/users", headers=headers_for(test_user))
        assert response.status_code == 403
        assert response.json()["error"]["details"] == {"required_roles": ["admin"]}

    async def test_list_users(self, client, test_admin, test_user, headers_for):
        response = await client.get("/users?limit=1", headers=headers_for(test_admin))
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert len(data["users"]) == 1

    async def test_deactivate_user(self, client, test_db, test_admin, test_user, headers_for):
        response = await client.delete(f"/users/{test_user.id}", headers=headers_for(test_admin))
        assert response.status_code == 204

        # The deactivated account can no longer authenticate
        profile = await client.get("/auth/profile", headers=headers_for(test_user))
        assert profile.status_code == 401

    async def test_deactivate_unknown_user(self, client, test_admin, headers_for):
        response = await client.delete("/users/777", headers=headers_for(test_admin))
        assert response.status_code == 404

    async def test_assign_direct_organization(self, client, test_admin, test_user, make_organization, headers_for):
        organization = await make_organization(test_admin)
        response = await client.put(
            f"/users/{test_user.id}/organization",
            json={"organization_id": organization.id},
            headers=headers_for(test_admin),
        )
        assert response.status_code == 200
        assert response.json()["organization_id"] == organization.id

        cleared = await client.put(
            f"/users/{test_user.id}/organization", json={"organization_id": None}, headers=headers_for(test_admin)
        )
        assert cleared.json()["organization_id"] is None

    async def test_assign_unknown_organization(self, client, test_admin, test_user, headers_for):
        response = await client.put(
            f"/users/{test_user.id}/organization", json={"organization_id": 999}, headers=headers_for(test_admin)
        )
        assert response.status_code == 404
