"""
Shared fixtures: settings, storage, services, and an app with its lifespan.
"""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from scribe.api.app import create_app, lifespan
from scribe.auth.jwt import TokenService
from scribe.auth.passwords import PasswordHasher
from scribe.config import Settings
from scribe.services import IdentityService, PostService
from scribe.storage import create_local_storage

PASSWORD = "Password123!"


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings():
    """Fast hashing, fixed secret, restricted error output."""
    return Settings(
        environment="test",
        jwt_secret_key="test-secret-0123456789abcdef0123456789",
        password_hash_iterations=1_000,
        log_level="WARNING",
        verbose_errors=False,
        sentry_dsn="",
    )


@pytest.fixture
def storage():
    return create_local_storage()


@pytest.fixture
def hasher(settings):
    return PasswordHasher(iterations=settings.password_hash_iterations)


@pytest.fixture
def tokens(settings):
    return TokenService.from_settings(settings)


@pytest.fixture
def identities(storage, hasher, tokens):
    return IdentityService(storage, hasher, tokens)


@pytest.fixture
def posts(storage):
    return PostService(storage)


@pytest.fixture
async def app(settings, storage):
    """App over the shared storage fixture, with startup run."""
    test_app = create_app(settings, storage=storage)
    async with lifespan(test_app):
        yield test_app


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def register(client):
    """Register a user over HTTP; returns (user_id, token)."""

    async def _register(username: str, email: str | None = None, password: str = PASSWORD):
        response = await client.post(
            "/api/auth/register",
            json={"username": username, "email": email or f"{username}@example.com", "password": password},
        )
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return data["user"]["user_id"], data["token"]

    return _register


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
