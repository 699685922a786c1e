"""
MindPad Backend — HTTP Endpoint Tests
======================================

What:  The FastAPI app over ASGITransport, with a per-test SQLite store and
       a mocked completion backend (see conftest.py).

What we test:
    ✅ Store API: CRUD, caller scoping, 401 without a session
    ✅ AI proxy: check order, error bodies, success + history
    ✅ CORS: every OPTIONS answered with an empty 200 and the headers
    ✅ Unhandled exceptions: generic 500 that still carries CORS headers
    ✅ Pages: landing and /app redirects follow the session
    ✅ /health and the X-Request-ID header
"""

from unittest.mock import patch
from uuid import uuid4

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from mindpad.exceptions import GatewayCreditsError, GatewayError, GatewayRateLimitError
from mindpad.main import unexpected_error_response
from mindpad.middleware.cors import PermissiveCORSMiddleware
from mindpad.services.gateway_service import gateway_service


# ══════════════════════════════════════════════════════════════════════════
# Store API
# ══════════════════════════════════════════════════════════════════════════

class TestNotesApi:

    @pytest.mark.asyncio
    async def test_requires_session(self, test_client):
        response = await test_client.get("/api/notes")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["message"] == "No authorization header"

    @pytest.mark.asyncio
    async def test_invalid_session(self, test_client):
        response = await test_client.get(
            "/api/notes", headers={"Authorization": "Bearer not-a-token"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_crud_flow(self, test_client, auth_headers):
        created = await test_client.post("/api/notes", headers=auth_headers)
        assert created.status_code == 201
        note = created.json()
        assert (note["title"], note["content"]) == ("Untitled", "")

        patched = await test_client.patch(
            f"/api/notes/{note['id']}",
            json={"title": "Groceries", "content": "Milk, eggs"},
            headers=auth_headers,
        )
        assert patched.status_code == 200
        assert patched.json()["title"] == "Groceries"

        listed = await test_client.get("/api/notes", headers=auth_headers)
        assert listed.status_code == 200
        assert [n["id"] for n in listed.json()] == [note["id"]]
        assert listed.headers["X-Total-Count"] == "1"

        fetched = await test_client.get(f"/api/notes/{note['id']}", headers=auth_headers)
        assert fetched.json()["content"] == "Milk, eggs"

        deleted = await test_client.delete(f"/api/notes/{note['id']}", headers=auth_headers)
        assert deleted.status_code == 204

        gone = await test_client.get(f"/api/notes/{note['id']}", headers=auth_headers)
        assert gone.status_code == 404
        assert gone.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_other_users_note_is_404(self, test_client, auth_headers, other_auth_headers):
        created = await test_client.post(
            "/api/notes", json={"title": "Private"}, headers=other_auth_headers
        )
        note_id = created.json()["id"]

        for method in ("GET", "DELETE"):
            response = await test_client.request(
                method, f"/api/notes/{note_id}", headers=auth_headers
            )
            assert response.status_code == 404
        patched = await test_client.patch(
            f"/api/notes/{note_id}", json={"content": "hijack"}, headers=auth_headers
        )
        assert patched.status_code == 404
        assert (await test_client.get("/api/notes", headers=auth_headers)).json() == []

    @pytest.mark.asyncio
    async def test_invalid_uuid_is_422(self, test_client, auth_headers):
        response = await test_client.get("/api/notes/not-a-uuid", headers=auth_headers)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_current_user(self, test_client, auth_headers, user_id):
        response = await test_client.get("/auth/user", headers=auth_headers)
        assert response.json() == {"id": str(user_id), "email": "ada@example.com"}


# ══════════════════════════════════════════════════════════════════════════
# AI proxy
# ══════════════════════════════════════════════════════════════════════════

class TestAssistantProxy:

    async def _create_note(self, test_client, auth_headers, content="Draft of the launch plan"):
        response = await test_client.post(
            "/api/notes", json={"title": "Launch", "content": content}, headers=auth_headers
        )
        return response.json()["id"]

    @pytest.mark.asyncio
    async def test_success_returns_text_and_records_history(
        self, test_client, auth_headers, llm
    ):
        note_id = await self._create_note(test_client, auth_headers)

        response = await test_client.post(
            "/functions/ai-assistant",
            json={"action": "summarize", "content": "Draft of the launch plan", "noteId": note_id},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json() == {"response": "Generated text"}
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        llm.complete.assert_awaited_once()

        history = await test_client.get(f"/api/notes/{note_id}/history", headers=auth_headers)
        entries = history.json()
        assert len(entries) == 1
        assert entries[0]["prompt"] == "summarize"
        assert entries[0]["ai_response"] == "Generated text"

    @pytest.mark.asyncio
    async def test_missing_credential_wins_over_missing_auth(self, test_client, llm):
        llm.is_configured = False

        response = await test_client.post(
            "/functions/ai-assistant", json={"action": "bogus", "content": "x"}
        )

        assert response.status_code == 500
        assert response.json() == {"error": "AI_GATEWAY_API_KEY is not configured"}
        llm.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_auth_wins_over_invalid_action(self, test_client, llm):
        response = await test_client.post(
            "/functions/ai-assistant", json={"action": "bogus", "content": "x"}
        )

        assert response.status_code == 401
        assert response.json() == {"error": "No authorization header"}
        llm.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_action(self, test_client, auth_headers, llm):
        response = await test_client.post(
            "/functions/ai-assistant",
            json={"action": "translate", "content": "x"},
            headers=auth_headers,
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Invalid action"}
        llm.complete.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"content": "x"},
            {"action": None, "content": "x"},
            {"action": 5, "content": "x"},
            {"action": ["summarize"], "content": "x"},
        ],
    )
    async def test_malformed_action_is_invalid_action(self, test_client, auth_headers, llm, body):
        response = await test_client.post(
            "/functions/ai-assistant", json=body, headers=auth_headers
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Invalid action"}
        llm.complete.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error,status,message",
        [
            (GatewayRateLimitError, 429, "Rate limit exceeded. Please try again later."),
            (GatewayCreditsError, 402, "AI credits exhausted. Please add credits."),
            (GatewayError, 500, "AI gateway error"),
        ],
    )
    async def test_gateway_errors_write_no_history(
        self, test_client, auth_headers, llm, error, status, message
    ):
        note_id = await self._create_note(test_client, auth_headers)
        llm.complete.side_effect = error()

        response = await test_client.post(
            "/functions/ai-assistant",
            json={"action": "rewrite_concise", "content": "x", "noteId": note_id},
            headers=auth_headers,
        )

        assert response.status_code == status
        assert response.json() == {"error": message}
        history = await test_client.get(f"/api/notes/{note_id}/history", headers=auth_headers)
        assert history.json() == []

    @pytest.mark.asyncio
    async def test_preflight(self, test_client):
        response = await test_client.options(
            "/functions/ai-assistant",
            headers={"Origin": "https://mindpad.example", "Access-Control-Request-Method": "POST"},
        )

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert response.headers["Access-Control-Allow-Headers"] == (
            "authorization, x-client-info, apikey, content-type"
        )

    @pytest.mark.asyncio
    async def test_bare_options_is_also_answered(self, test_client):
        response = await test_client.options("/api/notes")
        assert response.status_code == 200
        assert response.content == b""


# ══════════════════════════════════════════════════════════════════════════
# Pages & health
# ══════════════════════════════════════════════════════════════════════════

class TestPages:

    @pytest.mark.asyncio
    async def test_app_without_session_redirects_to_auth(self, test_client):
        response = await test_client.get("/app")
        assert response.status_code == 307
        assert response.headers["location"] == "/auth"

    @pytest.mark.asyncio
    async def test_app_with_cookie_session(self, test_client, access_token, user_id):
        test_client.cookies.set("access_token", access_token)
        response = await test_client.get("/app")

        assert response.status_code == 200
        body = response.json()
        assert body["user"]["id"] == str(user_id)
        assert body["notes"] == []

    @pytest.mark.asyncio
    async def test_landing_redirects_signed_in_users(self, test_client, auth_headers):
        assert (await test_client.get("/")).status_code == 200
        response = await test_client.get("/", headers=auth_headers)
        assert response.status_code == 307
        assert response.headers["location"] == "/app"

    @pytest.mark.asyncio
    async def test_auth_page(self, test_client):
        response = await test_client.get("/auth")
        assert response.status_code == 200
        assert response.json()["next"] == "/app"


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["database"] == "connected"
        assert body["gateway"] == "configured"
        assert body["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_health_degraded_without_gateway_key(self, test_client):
        with patch.object(gateway_service, "api_key", ""):
            body = (await test_client.get("/health")).json()
        assert body["gateway"] == "unconfigured"
        assert body["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "abc12345"})
        assert response.headers["X-Request-ID"] == "abc12345"

        generated = await test_client.get(f"/api/notes/{uuid4()}")
        assert len(generated.headers["X-Request-ID"]) == 8


class TestUnexpectedErrors:

    @pytest.mark.asyncio
    async def test_unhandled_exception_keeps_cors_headers(self, caplog):
        failing_app = FastAPI()
        failing_app.add_middleware(
            PermissiveCORSMiddleware,
            allow_origins=["*"],
            allow_headers="authorization, content-type",
            error_response=unexpected_error_response,
        )

        @failing_app.get("/boom")
        async def boom():
            raise RuntimeError("kaboom")

        transport = ASGITransport(app=failing_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            with caplog.at_level("ERROR", logger="mindpad.main"):
                response = await client.get("/boom")

        assert response.status_code == 500
        assert response.json()["error"] == "internal_server_error"
        assert "kaboom" not in response.text
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert "RuntimeError: kaboom" in caplog.text
