"""
Tests for the request pipeline as a whole: error rendering at the
boundary and the end-to-end ownership flow.
"""

import logging

import pytest
from httpx import ASGITransport, AsyncClient

from scribe.api.app import create_app, lifespan
from scribe.storage import StorageError
from tests.conftest import bearer


async def _boom():
    raise StorageError("connection to 10.0.0.5 refused")


@pytest.fixture
def boom_route(app):
    app.add_api_route("/api/boom", _boom, methods=["GET"])


class TestErrorBoundary:
    async def test_unexpected_fault_is_generic(self, client, boom_route, caplog):
        with caplog.at_level(logging.ERROR, logger="scribe"):
            response = await client.get("/api/boom")

        assert response.status_code == 500
        assert response.json() == {"status": "error", "message": "Something went wrong!"}
        assert "10.0.0.5" not in response.text
        # full detail stays server-side
        assert any(r.exc_info and "10.0.0.5" in str(r.exc_info[1]) for r in caplog.records)

    async def test_verbose_mode(self, settings):
        verbose_app = create_app(settings.model_copy(update={"verbose_errors": True}))
        verbose_app.add_api_route("/api/boom", _boom, methods=["GET"])

        async with lifespan(verbose_app):
            transport = ASGITransport(app=verbose_app)
            async with AsyncClient(transport=transport, base_url="http://test") as c:
                response = await c.get("/api/boom")

        body = response.json()
        assert response.status_code == 500
        assert body["message"] == "Something went wrong!"
        assert body["error"] == "StorageError"
        assert body["stack"]

    async def test_unknown_route(self, client):
        response = await client.get("/api/nowhere")

        assert response.status_code == 404
        assert response.json() == {"status": "fail", "message": "Can't find /api/nowhere on this server!"}

    async def test_operational_errors_are_logged(self, client, caplog):
        with caplog.at_level(logging.WARNING, logger="scribe"):
            await client.get("/api/posts/999")

        record = next(r for r in caplog.records if r.getMessage().startswith("Operational error"))
        assert record.method == "GET"
        assert record.path == "/api/posts/999"
        assert record.status_code == 404

    async def test_request_id_header(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        assert response.headers["X-Request-ID"]
        assert response.json()["status"] == "success"


class TestEndToEnd:
    async def test_alice_flow(self, client):
        registered = await client.post(
            "/api/auth/register",
            json={"username": "alice", "email": "alice@x.com", "password": "Password123!"},
        )
        assert registered.status_code == 201
        alice_id = registered.json()["data"]["user"]["user_id"]
        t1 = registered.json()["data"]["token"]

        created = await client.post(
            "/api/posts",
            json={"title": "Hello", "content": "First post", "tags": ["intro"]},
            headers=bearer(t1),
        )
        assert created.status_code == 201
        post = created.json()["data"]["post"]
        assert post["owner_id"] == alice_id

        other = await client.post(
            "/api/auth/register",
            json={"username": "mallory", "email": "mallory@x.com", "password": "Password123!"},
        )
        t2 = other.json()["data"]["token"]

        hijack = await client.put(f"/api/posts/{post['post_id']}", json={"title": "Mine now"}, headers=bearer(t2))
        assert hijack.status_code == 403

        removed = await client.delete(f"/api/posts/{post['post_id']}", headers=bearer(t1))
        assert removed.status_code == 200

        gone = await client.get(f"/api/posts/{post['post_id']}")
        assert gone.status_code == 404
