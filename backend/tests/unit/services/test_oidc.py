"""
Unit tests for the OpenID Connect client.
"""
import base64
import hashlib
import time
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from ventureconnect.services.oidc import (
    OIDCClient, OIDCError, claims_to_user_data, generate_pkce_pair, token_session,
)


def test_pkce_pair_uses_s256():
    verifier, challenge = generate_pkce_pair()
    expected = base64.urlsafe_b64encode(hashlib.sha256(verifier.encode()).digest()).rstrip(b"=").decode()
    assert challenge == expected
    assert 43 <= len(verifier) <= 128


async def test_discovery_is_cached(provider):
    client = provider.client()

    first = await client.discover()
    second = await client.discover()

    assert first is second
    assert provider.paths() == ["/.well-known/openid-configuration"]


async def test_discovery_refetched_after_ttl(provider):
    client = provider.client(discovery_ttl=0)

    await client.discover()
    await client.discover()

    assert provider.paths().count("/.well-known/openid-configuration") == 2


async def test_discovery_failure_raises():
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    client = OIDCClient("https://broken.example.com", "cid", transport=transport)

    with pytest.raises(OIDCError):
        await client.discover()


async def test_authorization_url(provider):
    client = provider.client()

    url = await client.authorization_url("https://testserver/api/callback", "st", "nn", "ch")

    parsed = urlparse(url)
    params = {k: v[0] for k, v in parse_qs(parsed.query).items()}
    assert url.startswith(f"{provider.issuer}/auth?")
    assert params["client_id"] == provider.client_id
    assert params["scope"] == "openid email profile offline_access"
    assert params["prompt"] == "login consent"
    assert params["code_challenge_method"] == "S256"
    assert params["state"] == "st"
    assert params["nonce"] == "nn"
    assert params["redirect_uri"] == "https://testserver/api/callback"


async def test_exchange_code_posts_verifier(provider):
    client = provider.client()

    tokens = await client.exchange_code("the-code", "https://testserver/api/callback", "verifier")

    assert tokens["access_token"] == "access-token"
    token_request = provider.requests[-1]
    form = parse_qs(token_request.content.decode())
    assert form["grant_type"] == ["authorization_code"]
    assert form["code_verifier"] == ["verifier"]
    assert form["client_id"] == [provider.client_id]
    assert form["client_secret"] == ["shh"]


async def test_token_endpoint_error(provider):
    provider.token_status = 400
    client = provider.client()

    with pytest.raises(OIDCError):
        await client.refresh("stale")


async def test_verify_id_token(provider):
    provider.nonce = "n-1"
    client = provider.client()

    claims = await client.verify_id_token(provider.id_token(), nonce="n-1", access_token="access-token")

    assert claims["sub"] == "oidc-123"
    assert "/jwks" in provider.paths()


@pytest.mark.parametrize("overrides,nonce", [
    ({"aud": "someone-else"}, None),
    ({"iss": "https://evil.example.com"}, None),
    ({"exp": 1000}, None),
    ({"nonce": "other"}, "expected"),
])
async def test_verify_id_token_rejects(provider, overrides, nonce):
    client = provider.client()

    with pytest.raises(OIDCError):
        await client.verify_id_token(provider.id_token(**overrides), nonce=nonce)


async def test_end_session_url(provider):
    client = provider.client()

    url = await client.end_session_url("http://testserver")

    params = parse_qs(urlparse(url).query)
    assert url.startswith(f"{provider.issuer}/session/end?")
    assert params["post_logout_redirect_uri"] == ["http://testserver"]
    assert params["client_id"] == [provider.client_id]


def test_claims_to_user_data_full_name():
    data = claims_to_user_data({
        "sub": "1", "username": "ada", "email": "a@b.c", "first_name": "Ada", "last_name": "Lovelace",
        "bio": "Math", "profile_image_url": "https://img/x.png",
    })
    assert data.name == "Ada Lovelace"
    assert data.avatar_url == "https://img/x.png"
    assert data.bio == "Math"
    assert data.user_type == "entrepreneur"


@pytest.mark.parametrize("claims,name", [
    ({"first_name": "Ada"}, "Ada"),
    ({"last_name": "Lovelace"}, "ada"),
    ({}, "ada"),
])
def test_claims_to_user_data_name_fallbacks(claims, name):
    data = claims_to_user_data({"sub": "1", "username": "ada", "email": "a@b.c", **claims})
    assert data.name == name


def test_token_session_keeps_previous_refresh_token():
    previous = {"refresh_token": "old-refresh"}
    session = token_session({"access_token": "new", "expires_in": 60}, {"sub": "1"}, previous)

    assert session["refresh_token"] == "old-refresh"
    assert session["access_token"] == "new"
    assert session["expires_at"] >= int(time.time()) + 59


def test_token_session_uses_id_token_expiry():
    session = token_session({"access_token": "a", "id_token": "x", "refresh_token": "r"}, {"exp": 12345})
    assert session["expires_at"] == 12345
    assert session["refresh_token"] == "r"
