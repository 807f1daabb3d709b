"""
Tests for mcp_server/mcp_transport.py - the Streamable HTTP transport router.

Uses httpx.AsyncClient with ASGITransport against a fresh ``create_app``
instance per test. ASGITransport buffers the whole response body, so SSE tests
rely on the short stream idle timeout configured in conftest.

Coverage targets:
  - POST  /mcp   - single request, batches, notifications only, parse errors
  - GET   /mcp   - 406 without SSE accept, heartbeat stream, setup failure
  - DELETE /mcp  - termination, 405 for missing or unknown sessions
  - Origin guard - 403 before any protocol work
"""

from unittest.mock import AsyncMock

import httpx
import pytest

from mcp_server.mcp import INTERNAL_ERROR, INVALID_REQUEST, METHOD_NOT_FOUND, PARSE_ERROR
from mcp_server.services.stream_transport import StreamSetupError

HEARTBEAT_FRAME = "id: heartbeat\nevent: heartbeat\ndata: connected\n\n"
SSE_ACCEPT = {"Accept": "text/event-stream"}


def _make_client(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    )


def _rpc(method: str, id: int | None = 1, params: dict | None = None) -> dict:
    message = {"jsonrpc": "2.0", "method": method}
    if id is not None:
        message["id"] = id
    if params is not None:
        message["params"] = params
    return message


# ---------------------------------------------------------------------------
# POST
# ---------------------------------------------------------------------------


class TestPost:
    pytestmark = pytest.mark.asyncio

    async def test_initialize_returns_single_response_and_session(self, app):
        async with _make_client(app) as client:
            resp = await client.post("/mcp", json=_rpc("initialize"))

        assert resp.status_code == 200
        body = resp.json()
        assert body["jsonrpc"] == "2.0"
        assert body["id"] == 1
        assert body["result"]["protocolVersion"] == "2024-11-05"
        assert "serverInfo" in body["result"]

        session_id = resp.headers["mcp-session-id"]
        assert app.state.sessions.get(session_id).initialized is True

    async def test_session_header_is_reused(self, app):
        async with _make_client(app) as client:
            first = await client.post("/mcp", json=_rpc("initialize"))
            session_id = first.headers["mcp-session-id"]
            second = await client.post(
                "/mcp", json=_rpc("tools/list", id=2), headers={"Mcp-Session-Id": session_id}
            )

        assert second.headers["mcp-session-id"] == session_id
        assert len(second.json()["result"]["tools"]) == 8
        assert app.state.sessions.count() == 1

    async def test_unknown_session_header_gets_fresh_session(self, app):
        async with _make_client(app) as client:
            resp = await client.post(
                "/mcp", json=_rpc("tools/list"), headers={"Mcp-Session-Id": "stale-session"}
            )

        assert resp.status_code == 200
        assert resp.headers["mcp-session-id"] != "stale-session"

    async def test_notifications_only_is_accepted_without_body(self, app):
        async with _make_client(app) as client:
            resp = await client.post(
                "/mcp", json=_rpc("notifications/cancel", id=None, params={"requestId": 1})
            )

        assert resp.status_code == 202
        assert resp.content == b""
        assert "mcp-session-id" in resp.headers

    async def test_responses_only_is_accepted(self, app):
        async with _make_client(app) as client:
            resp = await client.post("/mcp", json={"jsonrpc": "2.0", "id": 9, "result": {}})

        assert resp.status_code == 202
        assert resp.content == b""

    async def test_batch_with_one_request_returns_single_object(self, app):
        batch = [_rpc("notifications/initialized", id=None), _rpc("tools/list", id=2)]
        async with _make_client(app) as client:
            resp = await client.post("/mcp", json=batch)

        assert resp.status_code == 200
        body = resp.json()
        assert isinstance(body, dict)
        assert body["id"] == 2

    async def test_batch_with_many_requests_returns_array_in_order(self, app):
        batch = [
            _rpc("initialize", id="a"),
            _rpc("notifications/cancel", id=None),
            _rpc("tools/call", id="b", params={"name": "add", "arguments": {"a": 2, "b": 3}}),
            _rpc("unknown/x", id="c"),
        ]
        async with _make_client(app) as client:
            resp = await client.post("/mcp", json=batch)

        body = resp.json()
        assert [entry["id"] for entry in body] == ["a", "b", "c"]
        assert body[1]["result"]["content"][0]["text"] == "5"
        assert body[2]["error"]["code"] == METHOD_NOT_FOUND

    async def test_unknown_method_is_error_response(self, app):
        async with _make_client(app) as client:
            resp = await client.post("/mcp", json=_rpc("unknown/x", id=2))

        assert resp.status_code == 200
        assert resp.json()["error"]["code"] == METHOD_NOT_FOUND

    async def test_malformed_json_is_parse_error(self, app):
        async with _make_client(app) as client:
            resp = await client.post(
                "/mcp", content=b"{not json", headers={"Content-Type": "application/json"}
            )

        assert resp.status_code == 400
        body = resp.json()
        assert body["id"] is None
        assert body["error"]["code"] == PARSE_ERROR
        assert "mcp-session-id" not in resp.headers

    async def test_unclassifiable_message_is_parse_error(self, app):
        async with _make_client(app) as client:
            resp = await client.post("/mcp", json={"jsonrpc": "2.0", "id": 1})

        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == PARSE_ERROR

    async def test_bad_element_fails_whole_batch(self, app):
        async with _make_client(app) as client:
            resp = await client.post("/mcp", json=[_rpc("initialize"), {"jsonrpc": "2.0"}])

        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == PARSE_ERROR

    async def test_empty_batch_is_accepted(self, app):
        async with _make_client(app) as client:
            resp = await client.post("/mcp", json=[])

        assert resp.status_code == 202
        assert resp.content == b""
        assert "mcp-session-id" in resp.headers

    async def test_deeply_nested_body_is_parse_error(self, app):
        body = "[" * 5000 + "]" * 5000
        async with _make_client(app) as client:
            resp = await client.post(
                "/mcp", content=body, headers={"Content-Type": "application/json"}
            )

        assert resp.status_code == 400
        assert resp.json()["id"] is None
        assert resp.json()["error"]["code"] == PARSE_ERROR


# ---------------------------------------------------------------------------
# GET
# ---------------------------------------------------------------------------


class TestGet:
    pytestmark = pytest.mark.asyncio

    async def test_without_sse_accept_is_not_acceptable(self, app):
        async with _make_client(app) as client:
            resp = await client.get("/mcp", headers={"Accept": "application/json"})

        assert resp.status_code == 406
        assert resp.json()["error"]["code"] == INVALID_REQUEST
        assert app.state.streams.count() == 0

    async def test_stream_starts_with_heartbeat(self, app):
        async with _make_client(app) as client:
            resp = await client.get("/mcp", headers=SSE_ACCEPT)

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/event-stream")
        assert resp.headers["cache-control"] == "no-cache, no-store"
        assert resp.headers["x-accel-buffering"] == "no"
        assert "mcp-session-id" in resp.headers
        assert resp.text.startswith(HEARTBEAT_FRAME)
        # Idle timeout has fired by the time ASGITransport returns
        assert app.state.streams.count() == 0

    async def test_stream_binds_to_existing_session(self, app):
        session = app.state.sessions.create()
        async with _make_client(app) as client:
            resp = await client.get(
                "/mcp",
                headers={
                    **SSE_ACCEPT,
                    "Mcp-Session-Id": session.session_id,
                    "Last-Event-ID": "12",
                },
            )

        assert resp.status_code == 200
        assert resp.headers["mcp-session-id"] == session.session_id

    async def test_setup_failure_is_server_error(self, app, monkeypatch):
        monkeypatch.setattr(
            app.state.streams, "open", AsyncMock(side_effect=StreamSetupError("boom"))
        )
        async with _make_client(app) as client:
            resp = await client.get("/mcp", headers=SSE_ACCEPT)

        assert resp.status_code == 500
        assert resp.json()["error"]["code"] == INTERNAL_ERROR


# ---------------------------------------------------------------------------
# DELETE
# ---------------------------------------------------------------------------


class TestDelete:
    pytestmark = pytest.mark.asyncio

    async def test_terminates_session_and_stream(self, app):
        session = app.state.sessions.create()
        channel = await app.state.streams.open(session.session_id)

        async with _make_client(app) as client:
            resp = await client.delete("/mcp", headers={"Mcp-Session-Id": session.session_id})

        assert resp.status_code == 200
        assert app.state.sessions.get(session.session_id) is None
        assert app.state.streams.count() == 0
        assert channel.closed

    async def test_second_delete_is_not_allowed(self, app):
        session = app.state.sessions.create()
        headers = {"Mcp-Session-Id": session.session_id}
        async with _make_client(app) as client:
            first = await client.delete("/mcp", headers=headers)
            second = await client.delete("/mcp", headers=headers)

        assert first.status_code == 200
        assert second.status_code == 405

    async def test_without_session_header(self, app):
        async with _make_client(app) as client:
            resp = await client.delete("/mcp")

        assert resp.status_code == 405

    async def test_stream_of_evicted_session_is_closed(self, app):
        channel = await app.state.streams.open("evicted-session")

        async with _make_client(app) as client:
            resp = await client.delete("/mcp", headers={"Mcp-Session-Id": "evicted-session"})

        assert resp.status_code == 405
        assert channel.closed
        assert app.state.streams.count() == 0


# ---------------------------------------------------------------------------
# Origin guard
# ---------------------------------------------------------------------------


class TestOriginGuard:
    pytestmark = pytest.mark.asyncio

    async def test_foreign_origin_on_localhost_is_forbidden(self, app):
        async with _make_client(app) as client:
            resp = await client.post(
                "/mcp",
                json=_rpc("initialize"),
                headers={"Host": "localhost:8080", "Origin": "http://evil.example"},
            )

        assert resp.status_code == 403
        assert resp.content == b""
        assert app.state.sessions.count() == 0

    async def test_local_origin_on_localhost_is_allowed(self, app):
        async with _make_client(app) as client:
            resp = await client.post(
                "/mcp",
                json=_rpc("initialize"),
                headers={"Host": "localhost:8080", "Origin": "http://localhost:3000"},
            )

        assert resp.status_code == 200

    async def test_guard_applies_to_every_verb(self, app):
        headers = {"Host": "127.0.0.1:8080", "Origin": "http://evil.example"}
        async with _make_client(app) as client:
            get_resp = await client.get("/mcp", headers={**headers, **SSE_ACCEPT})
            delete_resp = await client.delete("/mcp", headers=headers)

        assert get_resp.status_code == 403
        assert delete_resp.status_code == 403

    async def test_other_paths_are_not_guarded(self, app):
        async with _make_client(app) as client:
            resp = await client.get(
                "/health", headers={"Host": "localhost:8080", "Origin": "http://evil.example"}
            )

        assert resp.status_code == 200
