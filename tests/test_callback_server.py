"""Tests for the single-shot callback listener."""
import json

import httpx
import pytest
from aiohttp import test_utils

from oauth.callback_server import CallbackState, OAuthCallbackServer
from oauth.exceptions import (
    AuthorizationDenied,
    ListenerError,
    NonceMismatch,
    StateMismatch,
    TokenExchangeError,
)
from oauth.state import FlowState
from oauth.token_exchange import TokenExchanger

REDIRECT_URI = "http://127.0.0.1:8081/oauth/callback"
PATH = "/oauth/callback"


def _server(config, flow_state, token_payload=None, status=200, calls=None):
    payload = token_payload or {"access_token": "at-123", "token_type": "Bearer", "refresh_token": "rt-456"}

    def handler(request):
        if calls is not None:
            calls.append(request)
        return httpx.Response(status, json=payload)

    exchanger = TokenExchanger(config, REDIRECT_URI, transport=httpx.MockTransport(handler))
    return OAuthCallbackServer(config, flow_state, exchanger, PATH)


@pytest.mark.asyncio
async def test_valid_callback_returns_token_json(make_config):
    calls = []
    server = _server(make_config(), FlowState(state="good-state"), calls=calls)

    async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
        resp = await client.get(PATH, params={"state": "good-state", "code": "auth-code"})
        assert resp.status == 200
        body = json.loads(await resp.text())

    assert body["access_token"] == "at-123"
    assert body["refresh_token"] == "rt-456"
    assert len(calls) == 1
    assert "code=auth-code" in calls[0].content.decode()

    outcome = await server.wait_for_callback()
    assert outcome.ok
    assert outcome.token.access_token == "at-123"
    assert server.state is CallbackState.SUCCESS


@pytest.mark.asyncio
async def test_state_mismatch_rejected_without_exchange(make_config):
    calls = []
    server = _server(make_config(), FlowState(state="good-state"), calls=calls)

    async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
        resp = await client.get(PATH, params={"state": "forged", "code": "auth-code"})
        assert resp.status == 401
        assert "Invalid state: forged" in await resp.text()

    assert calls == []
    outcome = await server.wait_for_callback()
    assert isinstance(outcome.error, StateMismatch)
    assert server.state is CallbackState.REJECTED


@pytest.mark.asyncio
async def test_missing_state_rejected(make_config):
    server = _server(make_config(), FlowState(state="good-state"))

    async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
        resp = await client.get(PATH, params={"code": "auth-code"})
        assert resp.status == 401


@pytest.mark.asyncio
async def test_custom_code_param(make_config):
    calls = []
    server = _server(make_config(code_param="auth_code"), FlowState(state="s"), calls=calls)

    async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
        resp = await client.get(PATH, params={"state": "s", "auth_code": "xyz", "code": "ignored"})
        assert resp.status == 200

    assert "code=xyz" in calls[0].content.decode()


@pytest.mark.asyncio
async def test_exchange_failure_is_503(make_config):
    server = _server(make_config(), FlowState(state="s"), token_payload={"error": "invalid_grant"}, status=400)

    async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
        resp = await client.get(PATH, params={"state": "s", "code": "c"})
        assert resp.status == 503
        assert "Exchange error" in await resp.text()

    outcome = await server.wait_for_callback()
    assert isinstance(outcome.error, TokenExchangeError)


@pytest.mark.asyncio
async def test_provider_error_is_400(make_config):
    calls = []
    server = _server(make_config(), FlowState(state="s"), calls=calls)

    async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
        resp = await client.get(PATH, params={"state": "s", "error": "access_denied", "error_description": "User said no"})
        assert resp.status == 400
        assert "access_denied" in await resp.text()

    assert calls == []
    outcome = await server.wait_for_callback()
    assert isinstance(outcome.error, AuthorizationDenied)


@pytest.mark.asyncio
async def test_nonce_verified(make_config, id_token_factory):
    payload = {"access_token": "at", "id_token": id_token_factory({"nonce": "n-1"})}
    server = _server(make_config(nonce=True), FlowState(state="s", nonce="n-1"), token_payload=payload)

    async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
        resp = await client.get(PATH, params={"state": "s", "code": "c"})
        assert resp.status == 200
        assert json.loads(await resp.text())["id_token"] == payload["id_token"]


@pytest.mark.asyncio
async def test_nonce_mismatch_is_401(make_config, id_token_factory):
    payload = {"access_token": "at", "id_token": id_token_factory({"nonce": "replayed"})}
    server = _server(make_config(nonce=True), FlowState(state="s", nonce="n-1"), token_payload=payload)

    async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
        resp = await client.get(PATH, params={"state": "s", "code": "c"})
        assert resp.status == 401
        assert "access_token" not in await resp.text()

    outcome = await server.wait_for_callback()
    assert isinstance(outcome.error, NonceMismatch)


@pytest.mark.asyncio
async def test_missing_id_token_is_401(make_config):
    server = _server(make_config(nonce=True), FlowState(state="s", nonce="n-1"))

    async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
        resp = await client.get(PATH, params={"state": "s", "code": "c"})
        assert resp.status == 401
        assert "id_token" in await resp.text()


@pytest.mark.asyncio
async def test_only_first_callback_is_handled(make_config):
    calls = []
    server = _server(make_config(), FlowState(state="s"), calls=calls)

    async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
        first = await client.get(PATH, params={"state": "wrong", "code": "c"})
        second = await client.get(PATH, params={"state": "s", "code": "c"})
        assert first.status == 401
        assert second.status == 410

    assert calls == []
    outcome = await server.wait_for_callback()
    assert isinstance(outcome.error, StateMismatch)


@pytest.mark.asyncio
async def test_verbose_logs_incoming_request(make_config, caplog):
    caplog.set_level("DEBUG", logger="oauth.callback_server")
    server = _server(make_config(verbose=True), FlowState(state="s"))

    async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
        await client.get(PATH, params={"state": "s", "code": "c"}, headers={"X-Trace": "yes"})

    messages = "\n".join(record.getMessage() for record in caplog.records)
    assert "Got callback: GET /oauth/callback?" in messages
    assert "X-Trace: yes" in messages


@pytest.mark.asyncio
async def test_bind_failure_is_listener_error(make_config):
    first = _server(make_config(port=0), FlowState(state="s"))
    await first.start()
    try:
        taken = first.bound_port
        second = _server(make_config(port=taken), FlowState(state="s"))
        with pytest.raises(ListenerError, match="failed to listen"):
            await second.start()
    finally:
        await first.stop()
