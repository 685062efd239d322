"""
Tests for the Google OAuth helpers: client config, PKCE, tokens and the
loopback callback listener.
"""

import base64
import hashlib
import json
import time
from urllib.parse import parse_qs, urlparse

import aiohttp
import httpx
import pytest

from docsync import AuthFailedError, ConfigurationError
from google_oauth import (
    OAuthCallbackServer,
    TokenSet,
    create_authorization_flow,
    exchange_code_for_tokens,
    generate_pkce,
    parse_client_config,
    refresh_access_token,
    start_callback_server,
)


def client_config(**section):
    data = {"client_id": "cid.apps.googleusercontent.com", "client_secret": "shh"}
    data.update(section)
    return parse_client_config(json.dumps({"installed": data}))


class TestClientConfig:

    def test_installed_section(self):
        config = client_config(token_uri="https://example.test/token")
        assert config.client_id == "cid.apps.googleusercontent.com"
        assert config.token_uri == "https://example.test/token"
        assert config.auth_uri == "https://accounts.google.com/o/oauth2/v2/auth"

    def test_web_section_and_bare_object(self):
        web = parse_client_config(json.dumps({"web": {"client_id": "a", "client_secret": "b"}}))
        bare = parse_client_config(json.dumps({"client_id": "a", "client_secret": "b"}))
        assert web.client_id == bare.client_id == "a"

    @pytest.mark.parametrize("blob", [
        "",
        "   ",
        "{not json",
        "[1, 2]",
        json.dumps({"installed": {"client_id": "a"}}),
    ])
    def test_rejected(self, blob):
        with pytest.raises(ConfigurationError):
            parse_client_config(blob)


class TestAuthorizationFlow:

    def test_pkce_challenge_matches_verifier(self):
        pkce = generate_pkce()
        digest = hashlib.sha256(pkce.verifier.encode()).digest()
        assert pkce.challenge == base64.urlsafe_b64encode(digest).decode().rstrip("=")

    def test_url_parameters(self):
        flow = create_authorization_flow(
            client_config(),
            "http://127.0.0.1:8765/oauth2callback",
            ["scope-a", "scope-b"],
            state="fixed-state",
        )
        parsed = urlparse(flow.url)
        params = {key: values[0] for key, values in parse_qs(parsed.query).items()}

        assert parsed.netloc == "accounts.google.com"
        assert params["client_id"] == "cid.apps.googleusercontent.com"
        assert params["redirect_uri"] == "http://127.0.0.1:8765/oauth2callback"
        assert params["scope"] == "scope-a scope-b"
        assert params["state"] == "fixed-state"
        assert params["code_challenge"] == flow.pkce.challenge
        assert params["code_challenge_method"] == "S256"
        assert params["access_type"] == "offline"
        assert params["prompt"] == "consent"

    def test_state_generated_when_omitted(self):
        first = create_authorization_flow(client_config(), "http://127.0.0.1/cb")
        second = create_authorization_flow(client_config(), "http://127.0.0.1/cb")
        assert first.state and first.state != second.state


class TestTokenSet:

    def test_expiry_buffer(self):
        now = time.time()
        assert TokenSet("a", expiry_date=int((now + 30) * 1000)).is_expired(now)
        assert not TokenSet("a", expiry_date=int((now + 120) * 1000)).is_expired(now)
        assert not TokenSet("a").is_expired(now)

    def test_scopes(self):
        tokens = TokenSet("a", scope="x y")
        assert tokens.has_scopes(["x"])
        assert not tokens.has_scopes(["z"])
        assert TokenSet("a").has_scopes(["z"])

    def test_dict_round_trip(self):
        tokens = TokenSet("a", refresh_token="r", expiry_date=123, scope="x")
        assert TokenSet.from_dict(tokens.to_dict()).to_dict() == tokens.to_dict()

    def test_from_dict_requires_access_token(self):
        with pytest.raises(KeyError):
            TokenSet.from_dict({"refresh_token": "r"})

    def test_from_response_keeps_previous_refresh_token(self):
        tokens = TokenSet.from_response({"access_token": "a", "expires_in": 3600}, previous_refresh_token="r")
        assert tokens.refresh_token == "r"
        assert tokens.expiry_date > time.time() * 1000


class TestTokenEndpoint:

    @pytest.mark.asyncio
    async def test_exchange(self):
        seen = []

        def handler(request):
            seen.append(parse_qs(request.content.decode()))
            return httpx.Response(200, json={"access_token": "a", "refresh_token": "r", "expires_in": 60})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            tokens = await exchange_code_for_tokens(client_config(), "code", "verifier", "http://127.0.0.1/cb", http=http)

        assert tokens.access_token == "a"
        assert seen[0]["code_verifier"] == ["verifier"]
        assert seen[0]["client_secret"] == ["shh"]

    @pytest.mark.asyncio
    async def test_exchange_rejected(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(400, json={"error": "invalid_grant"}))

        async with httpx.AsyncClient(transport=transport) as http:
            with pytest.raises(AuthFailedError):
                await exchange_code_for_tokens(client_config(), "code", "verifier", "http://127.0.0.1/cb", http=http)

    @pytest.mark.asyncio
    async def test_refresh_without_refresh_token(self):
        with pytest.raises(AuthFailedError):
            await refresh_access_token(client_config(), TokenSet("a"))

    @pytest.mark.asyncio
    async def test_refresh_keeps_scope(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"access_token": "b", "expires_in": 60}))

        async with httpx.AsyncClient(transport=transport) as http:
            tokens = await refresh_access_token(client_config(), TokenSet("a", refresh_token="r", scope="x"), http=http)

        assert (tokens.access_token, tokens.refresh_token, tokens.scope) == ("b", "r", "x")


class TestCallbackServer:

    @pytest.mark.asyncio
    async def test_ephemeral_port_and_success(self):
        server = await start_callback_server("state-1", host="127.0.0.1", port=0)
        try:
            assert server.port != 0
            assert server.redirect_uri.endswith("/oauth2callback")

            async with aiohttp.ClientSession() as session:
                async with session.get(server.redirect_uri, params={"code": "c", "state": "state-1"}) as response:
                    assert response.status == 200
                    assert "Authentication Successful" in await response.text()

            result = await server.wait_for_callback(timeout=1)
            assert result.ok and result.code == "c"
        finally:
            await server.stop()

    @pytest.mark.asyncio
    async def test_mismatched_state_is_ignored(self):
        server = await start_callback_server("state-1", host="127.0.0.1", port=0)
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(server.redirect_uri, params={"code": "c", "state": "forged"}) as response:
                    assert response.status == 400

            assert await server.wait_for_callback(timeout=0.05) is None
        finally:
            await server.stop()

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self):
        server = OAuthCallbackServer("s", host="127.0.0.1", port=0)
        await server.start()
        await server.stop()
        await server.stop()
        assert not server.running

    @pytest.mark.asyncio
    async def test_port_in_use_releases_runner(self):
        first = await start_callback_server("s", host="127.0.0.1", port=0)
        try:
            second = OAuthCallbackServer("s", host="127.0.0.1", port=first.port)
            with pytest.raises(OSError):
                await second.start()
            assert second.runner is None
            assert not second.running
            await second.stop()
        finally:
            await first.stop()
