"""
PlaceShare Backend: User API and Application Tests
==================================================

What we test:
    ✅ Signup returns {userId, email, token}; the token authorizes requests
    ✅ Duplicate email → 422 and the second avatar is not kept
    ✅ Signup input validation → 422
    ✅ Login with good / bad credentials
    ✅ User listing hides password hashes and shows place ids
    ✅ Unknown routes, health check, stored image serving
"""

from unittest.mock import AsyncMock, patch

import pytest


class TestSignup:
    @pytest.mark.asyncio
    async def test_signup_returns_token(self, client, register_user):
        body = await register_user("Ada@Mail.com")

        assert body["email"] == "ada@mail.com"
        assert body["userId"]
        assert body["token"]

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, app, client, register_user, sample_image_bytes, storage_dir):
        await register_user("ada@mail.com")
        images_before = sorted(p.name for p in storage_dir.iterdir())

        response = await client.post(
            "/api/users/signup",
            data={"name": "Ada Again", "email": "ada@mail.com", "password": "secret123"},
            files={"image": ("avatar.jpg", sample_image_bytes, "image/jpeg")},
        )
        await app.state.cleaner.drain()

        assert response.status_code == 422
        assert response.json()["message"] == "User exists already, please login instead."
        assert sorted(p.name for p in storage_dir.iterdir()) == images_before

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "fields",
        [
            {"name": "", "email": "ada@mail.com", "password": "secret123"},
            {"name": "Ada", "email": "not-an-email", "password": "secret123"},
            {"name": "Ada", "email": "ada@mail.com", "password": "short"},
        ],
    )
    async def test_invalid_input_rejected(self, client, sample_image_bytes, storage_dir, fields):
        response = await client.post(
            "/api/users/signup",
            data=fields,
            files={"image": ("avatar.jpg", sample_image_bytes, "image/jpeg")},
        )
        assert response.status_code == 422
        assert list(storage_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_missing_image_rejected(self, client):
        response = await client.post(
            "/api/users/signup",
            data={"name": "Ada", "email": "ada@mail.com", "password": "secret123"},
        )
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_with_valid_credentials(self, client, register_user):
        ada = await register_user("ada@mail.com", password="secret123")

        response = await client.post(
            "/api/users/login", json={"email": "ada@mail.com", "password": "secret123"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["userId"] == ada["userId"]
        assert body["email"] == "ada@mail.com"
        assert body["token"]

    @pytest.mark.asyncio
    async def test_wrong_password_is_401(self, client, register_user):
        await register_user("ada@mail.com", password="secret123")
        response = await client.post(
            "/api/users/login", json={"email": "ada@mail.com", "password": "wrong-pass"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials, could not log you in."

    @pytest.mark.asyncio
    async def test_unknown_email_is_401(self, client):
        response = await client.post(
            "/api/users/login", json={"email": "nobody@mail.com", "password": "secret123"}
        )
        assert response.status_code == 401


class TestListUsers:
    @pytest.mark.asyncio
    async def test_listing_hides_password_hash(self, client, register_user, sample_image_bytes, bearer):
        ada = await register_user()
        created = await client.post(
            "/api/places",
            data={
                "title": "Empire State",
                "description": "One of the most famous sky scrapers in the world!",
                "address": "20 W 34th St, New York, NY 10001",
            },
            files={"image": ("empire.jpg", sample_image_bytes, "image/jpeg")},
            headers=bearer(ada["token"]),
        )
        place_id = created.json()["place"]["id"]

        response = await client.get("/api/users")

        assert response.status_code == 200
        users = response.json()["users"]
        assert len(users) == 1
        assert users[0]["id"] == ada["userId"]
        assert users[0]["places"] == [place_id]
        assert "password" not in response.text
        assert "password_hash" not in users[0]


class TestApplication:
    @pytest.mark.asyncio
    async def test_unknown_route_is_404(self, client):
        response = await client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json()["message"] == "Could not find this route."

    @pytest.mark.asyncio
    async def test_health_reports_database(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_health_is_503_when_database_down(self, app, client):
        with patch.object(app.state.database, "ping", new_callable=AsyncMock, side_effect=OSError("refused")):
            response = await client.get("/health")
        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_avatar_is_served(self, app, client, register_user):
        await register_user()
        async with app.state.database.session() as session:
            from placeshare.repositories import UserRepository

            user = await UserRepository(session).get_by_email("ada@mail.com")

        response = await client.get(f"/{user.image_path}")
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"

    @pytest.mark.asyncio
    async def test_missing_image_is_404(self, client):
        response = await client.get("/uploads/images/missing.png")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_writer_owns_the_ownership_guard(self, app):
        from placeshare.services.ownership import OwnershipGuard

        assert isinstance(app.state.writer.guard, OwnershipGuard)
        assert not hasattr(app.state, "guard")
