"""Integration tests for authentication API."""

import pytest
from httpx import AsyncClient

from docflow.models.sql.user import User


@pytest.mark.asyncio
class TestAuthAPI:
    """Integration tests for authentication endpoints."""

    async def test_register_user(self, client: AsyncClient):
        """Test user registration."""
        response = await client.post(
            "/api/v1/auth/register",
            json={
                "email": "NewUser@Example.com",
                "name": "New User",
                "password": "securepass123",
                "department": "Mathematics",
                "position": "Professor",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "newuser@example.com"
        assert data["name"] == "New User"
        assert data["role"] == "user"
        assert data["department"] == "Mathematics"
        assert data["is_active"] is True
        assert "id" in data
        assert "hashed_password" not in data

    async def test_register_duplicate_email(self, client: AsyncClient, test_user: User):
        """Test registration with duplicate email fails."""
        response = await client.post(
            "/api/v1/auth/register",
            json={
                "email": test_user.email.upper(),
                "name": "Someone Else",
                "password": "securepass123",
            },
        )

        assert response.status_code == 400
        assert "already registered" in response.json()["detail"]

    async def test_password_validation(self, client: AsyncClient):
        """Test password length validation."""
        response = await client.post(
            "/api/v1/auth/register",
            json={
                "email": "short@example.com",
                "name": "Short",
                "password": "short",
            },
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["loc"] == ["body", "password"]

    async def test_login_success(self, client: AsyncClient, test_user: User, refresh_tokens: dict):
        """Test successful login."""
        response = await client.post(
            "/api/v1/auth/login",
            json={
                "email": test_user.email,
                "password": "testpass123",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert "access_token" in data
        assert data["token_type"] == "bearer"
        assert data["expires_in"] > 0
        assert refresh_tokens[str(test_user.id)] == data["refresh_token"]

    async def test_login_wrong_password(self, client: AsyncClient, test_user: User):
        """Test login with wrong password fails."""
        response = await client.post(
            "/api/v1/auth/login",
            json={
                "email": test_user.email,
                "password": "wrongpassword",
            },
        )

        assert response.status_code == 401
        assert "Invalid email or password" in response.json()["detail"]

    async def test_login_nonexistent_user(self, client: AsyncClient):
        """Test login with nonexistent user fails."""
        response = await client.post(
            "/api/v1/auth/login",
            json={
                "email": "nonexistent@example.com",
                "password": "somepassword",
            },
        )

        assert response.status_code == 401

    async def test_login_disabled_account(self, client: AsyncClient, test_user: User, db_session):
        """Test a deactivated account cannot log in."""
        test_user.is_active = False
        await db_session.flush()

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": test_user.email, "password": "testpass123"},
        )

        assert response.status_code == 403

    async def test_get_me_authenticated(self, client: AsyncClient, test_user: User, auth_headers: dict):
        """Test getting current user profile."""
        response = await client.get("/api/v1/auth/me", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["email"] == test_user.email
        assert data["department"] == "Computer Science"

    async def test_get_me_unauthenticated(self, client: AsyncClient):
        """Test getting profile without authentication fails."""
        response = await client.get("/api/v1/auth/me")

        assert response.status_code in (401, 403)

    async def test_get_me_bad_token(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    async def test_update_profile(self, client: AsyncClient, auth_headers: dict):
        """Test updating user profile."""
        response = await client.patch(
            "/api/v1/auth/me",
            headers=auth_headers,
            json={"name": "Updated Name", "position": "Head of Department"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Updated Name"
        assert data["position"] == "Head of Department"
        assert data["department"] == "Computer Science"


@pytest.mark.asyncio
class TestTokenLifecycle:
    """Tests for refresh, logout, and password change."""

    async def _login(self, client: AsyncClient, email: str, password: str = "testpass123") -> dict:
        response = await client.post("/api/v1/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200
        return response.json()

    async def test_refresh_token_flow(self, client: AsyncClient, test_user: User):
        """Test token refresh flow."""
        tokens = await self._login(client, test_user.email)

        response = await client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": tokens["refresh_token"]},
        )

        assert response.status_code == 200
        data = response.json()
        assert "access_token" in data
        assert "refresh_token" in data

    async def test_refresh_rejects_access_token(self, client: AsyncClient, test_user: User):
        tokens = await self._login(client, test_user.email)

        response = await client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": tokens["access_token"]},
        )

        assert response.status_code == 401

    async def test_refresh_token_is_single_use(self, client: AsyncClient, test_user: User):
        """Test a refresh token stops working once it has been exchanged."""
        tokens = await self._login(client, test_user.email)
        first = await client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert first.status_code == 200

        # Tokens minted within the same second can be identical
        if first.json()["refresh_token"] != tokens["refresh_token"]:
            again = await client.post(
                "/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]}
            )
            assert again.status_code == 401

    async def test_logout_revokes_refresh_token(self, client: AsyncClient, test_user: User):
        """Test logout invalidates refresh token."""
        tokens = await self._login(client, test_user.email)
        headers = {"Authorization": f"Bearer {tokens['access_token']}"}

        logout_res = await client.post("/api/v1/auth/logout", headers=headers)
        assert logout_res.status_code == 204

        refresh_res = await client.post(
            "/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]}
        )
        assert refresh_res.status_code == 401
        assert refresh_res.json()["detail"] == "Refresh token has been revoked"

        # Access token stays valid until it expires
        res = await client.get("/api/v1/auth/me", headers=headers)
        assert res.status_code == 200

    async def test_change_password(self, client: AsyncClient, test_user: User, auth_headers: dict):
        """Test password change."""
        response = await client.post(
            "/api/v1/auth/change-password",
            headers=auth_headers,
            json={"current_password": "testpass123", "new_password": "newsecurepass123"},
        )
        assert response.status_code == 204

        login_res = await client.post(
            "/api/v1/auth/login",
            json={"email": test_user.email, "password": "testpass123"},
        )
        assert login_res.status_code == 401

        await self._login(client, test_user.email, "newsecurepass123")

    async def test_change_password_wrong_current(self, client: AsyncClient, auth_headers: dict):
        response = await client.post(
            "/api/v1/auth/change-password",
            headers=auth_headers,
            json={"current_password": "nottheone1", "new_password": "newsecurepass123"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Current password is incorrect"
