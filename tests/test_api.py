import asyncio
import json

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from diamante_cli.api import DiamanteSender, extract_user_id, outcome_from_response
from diamante_cli.models import ConfigError, Failure, RateLimited, SessionError, Success

from conftest import make_token


def test_extract_user_id(token):
    assert extract_user_id(token) == "user-1234abcd"
    assert extract_user_id("not-a-jwt") is None
    assert extract_user_id("a.!!!.c") is None


def test_success_response():
    body = json.dumps({"success": True, "data": {"transferData": {"hash": "0xdead"}}})
    assert outcome_from_response(200, body, "1.5") == Success("0xdead", 1.5)


def test_success_hash_fallbacks():
    assert outcome_from_response(200, json.dumps({"success": True, "txHash": "0xt"}), 1).hash == "0xt"
    assert outcome_from_response(200, json.dumps({"success": True}), 1).hash == "✓"


def test_rate_limited_by_status_or_body():
    assert outcome_from_response(429, "Too Many Requests", 1) == RateLimited(None, 1)
    assert outcome_from_response(200, json.dumps({"status": 429}), 1, attempt=2) == RateLimited(None, 2)
    assert outcome_from_response(429, "", 1, retry_after="12") == RateLimited(12.0, 1)


def test_failure_messages():
    assert outcome_from_response(200, json.dumps({"success": False, "message": "Insufficient"}), 1) == Failure("Insufficient")
    assert outcome_from_response(400, json.dumps({"error": "bad address"}), 1) == Failure("bad address")
    assert outcome_from_response(502, "<html>bad gateway</html>", 1) == Failure("HTTP 502")


def test_missing_token_is_config_error():
    with pytest.raises(ConfigError):
        DiamanteSender("")
    with pytest.raises(ConfigError):
        DiamanteSender("opaque-token")


async def test_submit_requires_open_session(token):
    sender = DiamanteSender(token)
    with pytest.raises(SessionError):
        await sender.submit("0xA", 1)


@pytest_asyncio.fixture
async def api_server():
    state = {"requests": [], "script": []}

    async def transfer(request):
        state["requests"].append((request.headers.copy(), await request.json()))
        if state["script"]:
            status, body = state["script"].pop(0)
            return web.Response(status=status, text=body, content_type="application/json")
        return web.json_response({"success": True, "data": {"transferData": {"hash": "0x" + "ab" * 32}}})

    async def history(request):
        body = await request.json()
        return web.json_response({"userId": body["userId"], "items": [], "limit": body["limit"]})

    app = web.Application()
    app.router.add_post("/api/v1/transaction/transfer", transfer)
    app.router.add_post("/api/v1/transaction/history", history)
    server = TestServer(app)
    await server.start_server()
    state["base_url"] = str(server.make_url("/api/v1"))
    yield state
    await server.close()


async def test_submit_posts_transfer(api_server, token):
    async with DiamanteSender(token, base_url=api_server["base_url"]) as sender:
        outcome = await sender.submit("0xRecipient", 1.25)
    assert outcome == Success("0x" + "ab" * 32, 1.25)
    headers, body = api_server["requests"][0]
    assert body == {"toAddress": "0xRecipient", "amount": 1.25, "userId": "user-1234abcd"}
    assert headers["access-token"] == token
    assert headers["Origin"] == "https://campaign.diamante.io"


async def test_submit_maps_rate_limit(api_server, token):
    api_server["script"].append((429, json.dumps({"status": 429, "message": "slow down"})))
    async with DiamanteSender(token, base_url=api_server["base_url"]) as sender:
        outcome = await sender.submit("0xA", 1, attempt=2)
    assert outcome == RateLimited(None, 2)


async def test_submit_maps_rejection(api_server, token):
    api_server["script"].append((200, json.dumps({"success": False, "message": "Invalid address"})))
    async with DiamanteSender(token, base_url=api_server["base_url"]) as sender:
        outcome = await sender.submit("0xA", 1)
    assert outcome == Failure("Invalid address")


async def test_history(api_server, token):
    async with DiamanteSender(token, base_url=api_server["base_url"]) as sender:
        data = await sender.history(5)
    assert data == {"userId": "user-1234abcd", "items": [], "limit": 5}


async def test_session_closed_on_exit(api_server, token):
    sender = DiamanteSender(token, base_url=api_server["base_url"])
    async with sender:
        session = sender.session
        assert not session.closed
    assert session.closed
    assert sender.session is None


async def test_connection_error_is_failure(token):
    async with DiamanteSender(token, base_url="http://127.0.0.1:9/api/v1", timeout=2) as sender:
        outcome = await sender.submit("0xA", 1)
    assert isinstance(outcome, Failure)


async def test_explicit_user_id_wins():
    sender = DiamanteSender(make_token({"userId": "from-token"}), user_id="configured")
    assert sender.user_id == "configured"
