"""Integration tests for user administration API."""

import pytest
from httpx import AsyncClient

from docflow.models.sql.user import User


@pytest.mark.asyncio
class TestUsersAPI:
    """Integration tests for user administration endpoints."""

    async def test_list_users_admin(
        self, client: AsyncClient, test_user: User, other_user: User, admin_headers: dict
    ):
        """Test administrators can list accounts."""
        response = await client.get("/api/v1/users", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert data["pages"] == 1
        assert {u["email"] for u in data["items"]} == {
            "test@example.com",
            "other@example.com",
            "admin@example.com",
        }

    async def test_list_users_filters(
        self, client: AsyncClient, test_user: User, other_user: User, admin_headers: dict
    ):
        response = await client.get("/api/v1/users", headers=admin_headers, params={"role": "admin"})
        assert [u["email"] for u in response.json()["items"]] == ["admin@example.com"]

        response = await client.get("/api/v1/users", headers=admin_headers, params={"search": "other"})
        assert [u["email"] for u in response.json()["items"]] == ["other@example.com"]

    async def test_list_users_forbidden_for_user(self, client: AsyncClient, auth_headers: dict):
        """Test regular users cannot manage accounts."""
        response = await client.get("/api/v1/users", headers=auth_headers)

        assert response.status_code == 403

    async def test_get_user(self, client: AsyncClient, test_user: User, admin_headers: dict):
        response = await client.get(f"/api/v1/users/{test_user.id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["name"] == "Test User"

    async def test_get_unknown_user(self, client: AsyncClient, admin_headers: dict):
        response = await client.get(
            "/api/v1/users/00000000-0000-0000-0000-000000000000", headers=admin_headers
        )

        assert response.status_code == 404

    async def test_promote_user(
        self, client: AsyncClient, test_user: User, admin_headers: dict, auth_headers: dict
    ):
        """Test a promoted user gains administrator access on their next request."""
        response = await client.patch(
            f"/api/v1/users/{test_user.id}/role",
            headers=admin_headers,
            json={"role": "admin"},
        )

        assert response.status_code == 200
        assert response.json()["role"] == "admin"

        response = await client.get("/api/v1/users", headers=auth_headers)
        assert response.status_code == 200

    async def test_invalid_role(self, client: AsyncClient, test_user: User, admin_headers: dict):
        response = await client.patch(
            f"/api/v1/users/{test_user.id}/role",
            headers=admin_headers,
            json={"role": "superuser"},
        )

        assert response.status_code == 400

    async def test_cannot_change_own_role(self, client: AsyncClient, admin_user: User, admin_headers: dict):
        response = await client.patch(
            f"/api/v1/users/{admin_user.id}/role",
            headers=admin_headers,
            json={"role": "user"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot change your own role"

    async def test_deactivate_user(
        self,
        client: AsyncClient,
        test_user: User,
        admin_headers: dict,
        auth_headers: dict,
        refresh_tokens: dict,
    ):
        """Test deactivation blocks the account and revokes its refresh token."""
        refresh_tokens[str(test_user.id)] = "issued-token"

        response = await client.delete(f"/api/v1/users/{test_user.id}", headers=admin_headers)

        assert response.status_code == 204
        assert str(test_user.id) not in refresh_tokens

        response = await client.get("/api/v1/auth/me", headers=auth_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "User account is disabled"

    async def test_cannot_deactivate_self(self, client: AsyncClient, admin_user: User, admin_headers: dict):
        response = await client.delete(f"/api/v1/users/{admin_user.id}", headers=admin_headers)

        assert response.status_code == 400
