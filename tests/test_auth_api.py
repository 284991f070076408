"""
Tests for the auth routes and the bearer-token gate over HTTP.
"""

from datetime import timedelta

import pytest

from scribe.auth.jwt import TokenService
from scribe.core.utils import utc_now
from tests.conftest import PASSWORD, bearer


class TestRegister:
    async def test_register_returns_user_and_token(self, client, app):
        response = await client.post(
            "/api/auth/register",
            json={"username": "alice", "email": "alice@x.com", "password": PASSWORD},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "success"
        user = body["data"]["user"]
        assert user["username"] == "alice"
        assert user["email"] == "alice@x.com"
        assert "password_hash" not in user
        assert app.state.tokens.verify(body["data"]["token"]) == user["user_id"]

    @pytest.mark.parametrize(
        "username, email",
        [("alice", "new@x.com"), ("newbie", "alice@x.com")],
    )
    async def test_duplicate_is_400_not_500(self, client, register, username, email):
        await register("alice", "alice@x.com")

        response = await client.post(
            "/api/auth/register",
            json={"username": username, "email": email, "password": PASSWORD},
        )

        assert response.status_code == 400
        assert response.json() == {
            "status": "fail",
            "message": "User with this email or username already exists",
        }

    async def test_invalid_body_lists_every_field(self, client):
        response = await client.post(
            "/api/auth/register",
            json={"username": "a", "email": "not-an-email", "password": "short"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["status"] == "fail"
        assert body["message"] == "Validation failed"
        assert {e["field"] for e in body["errors"]} == {"username", "email", "password"}

    async def test_malformed_json(self, client):
        response = await client.post(
            "/api/auth/register",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "body"

    async def test_rejected_password_is_never_echoed(self, client):
        response = await client.post(
            "/api/auth/register",
            json={"username": "alice", "email": "alice@x.com", "password": "hunter2secret"},
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "password"
        assert "hunter2secret" not in response.text

    async def test_unencodable_email_is_400(self, client):
        response = await client.post(
            "/api/auth/register",
            content=b'{"username": "bob", "email": "b\\ud800@x.com", "password": "Password123!"}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["errors"] == [
            {"field": "body", "message": "Request body contains invalid characters"}
        ]


class TestLogin:
    async def test_login(self, client, register):
        user_id, _ = await register("alice")

        response = await client.post("/api/auth/login", json={"email": "ALICE@example.com", "password": PASSWORD})

        assert response.status_code == 200
        assert response.json()["data"]["user"]["user_id"] == user_id

    async def test_wrong_password(self, client, register):
        await register("alice")

        response = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "Nope123!"})

        assert response.status_code == 401
        assert response.json() == {"status": "fail", "message": "Invalid credentials"}

    async def test_password_required(self, client):
        response = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": ""})

        assert response.status_code == 400
        assert response.json()["errors"] == [{"field": "password", "message": "Password is required"}]


class TestAuthGate:
    async def test_no_header(self, client):
        response = await client.get("/api/users/profile")

        assert response.status_code == 401
        assert response.json() == {"status": "fail", "message": "No token provided"}

    async def test_wrong_scheme(self, client, register):
        _, token = await register("alice")

        response = await client.get("/api/users/profile", headers={"Authorization": f"Basic {token}"})

        assert response.status_code == 401
        assert response.json()["message"] == "No token provided"

    async def test_garbage_token(self, client):
        response = await client.get("/api/users/profile", headers=bearer("garbage"))

        assert response.status_code == 401
        assert response.json() == {"status": "fail", "message": "Invalid token"}

    async def test_expired_token(self, client, register, settings):
        user_id, _ = await register("alice")
        stale = TokenService(
            secret_key=settings.jwt_secret_key,
            clock=lambda: utc_now() - timedelta(hours=settings.jwt_expire_hours + 1),
        ).issue(user_id)

        response = await client.get("/api/users/profile", headers=bearer(stale))

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    async def test_deleted_identity_invalidates_token(self, client, register):
        _, token = await register("alice")

        deleted = await client.delete("/api/users/profile", headers=bearer(token))
        assert deleted.status_code == 200

        response = await client.get("/api/users/profile", headers=bearer(token))

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    async def test_valid_token(self, client, register):
        user_id, token = await register("alice")

        response = await client.get("/api/users/profile", headers=bearer(token))

        assert response.status_code == 200
        assert response.json()["data"]["user"]["user_id"] == user_id
