import pytest
from unittest.mock import patch

from src.exceptions import ValidationError


class TestUserSettingsAPI:
    @pytest.mark.asyncio
    async def test_get_settings_defaults(self, async_client):
        response = await async_client.get("/api/v1/users/me/settings")
        assert response.status_code == 200
        assert response.json() == {
            "display_name": "Test User",
            "photo_url": None,
            "theme": "system",
            "auto_summarize": True,
        }

    @pytest.mark.asyncio
    async def test_patch_settings(self, async_client):
        response = await async_client.patch(
            "/api/v1/users/me/settings", json={"theme": "dark", "auto_summarize": False}
        )
        assert response.status_code == 200
        assert response.json()["theme"] == "dark"
        assert response.json()["auto_summarize"] is False

    @pytest.mark.asyncio
    async def test_patch_settings_rejects_unknown_theme(self, async_client):
        response = await async_client.patch("/api/v1/users/me/settings", json={"theme": "sepia"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_last_read_round_trip(self, async_client):
        before = await async_client.get("/api/v1/users/me/last-read")
        assert before.json() == {"last_read_at": None}

        marked = await async_client.post("/api/v1/users/me/last-read")
        assert marked.status_code == 200
        assert marked.json()["last_read_at"] is not None

        after = await async_client.get("/api/v1/users/me/last-read")
        assert after.json()["last_read_at"] is not None


class TestAuthAPI:
    @pytest.mark.asyncio
    async def test_verify_token_requires_bearer(self, async_client):
        response = await async_client.post("/api/v1/auth/verify-token", headers={"Authorization": "Token abc"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_verify_token_valid(self, async_client):
        claims = {"uid": "uid-1", "email": "a@example.com", "name": "A"}
        with patch("src.api.v1.endpoints.auth.verify_firebase_token", return_value=claims):
            response = await async_client.post(
                "/api/v1/auth/verify-token", headers={"Authorization": "Bearer good-token"}
            )
        assert response.status_code == 200
        assert response.json() == {"valid": True, "firebase_uid": "uid-1", "email": "a@example.com", "name": "A"}

    @pytest.mark.asyncio
    async def test_verify_token_rejected(self, async_client):
        with patch("src.api.v1.endpoints.auth.verify_firebase_token", return_value=None):
            response = await async_client.post(
                "/api/v1/auth/verify-token", headers={"Authorization": "Bearer bad"}
            )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_signup_creates_user_with_default_display_name(self, async_client, test_db):
        from src.repositories.user_repository import UserRepository

        with patch("src.api.v1.endpoints.auth.create_firebase_account", return_value="firebase-new") as create:
            response = await async_client.post(
                "/api/v1/auth/signup", json={"email": "New.Person@example.com", "password": "secret1"}
            )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["user"]["email"] == "new.person@example.com"
        assert body["user"]["display_name"] == "new.person"
        create.assert_called_once_with("new.person@example.com", "secret1", "new.person")
        assert UserRepository(test_db).get_by_firebase_uid("firebase-new") is not None

    @pytest.mark.asyncio
    async def test_signup_existing_local_email(self, async_client):
        with patch("src.api.v1.endpoints.auth.create_firebase_account") as create:
            response = await async_client.post(
                "/api/v1/auth/signup", json={"email": "test@example.com", "password": "secret1"}
            )
        assert response.status_code == 400
        assert response.json()["detail"] == "Email already registered"
        create.assert_not_called()

    @pytest.mark.asyncio
    async def test_signup_existing_firebase_email(self, async_client):
        with patch(
            "src.api.v1.endpoints.auth.create_firebase_account",
            side_effect=ValidationError("Email already registered")
        ):
            response = await async_client.post(
                "/api/v1/auth/signup", json={"email": "fresh@example.com", "password": "secret1"}
            )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_signup_short_password(self, async_client):
        response = await async_client.post(
            "/api/v1/auth/signup", json={"email": "fresh@example.com", "password": "123"}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_forgot_password_always_succeeds(self, async_client):
        with patch("src.api.v1.endpoints.auth.request_password_reset", return_value=None):
            response = await async_client.post(
                "/api/v1/auth/forgot-password", json={"email": "nobody@example.com"}
            )
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "If an account exists with this email, you will receive a password reset link.",
        }


class TestHealthAPI:
    @pytest.mark.asyncio
    async def test_health_at_root_and_api_prefix(self, async_client):
        for path in ("/health", "/api/v1/health"):
            response = await async_client.get(path)
            assert response.status_code == 200
            assert response.json()["status"] == "healthy"
            assert response.json()["database"] == "healthy"
