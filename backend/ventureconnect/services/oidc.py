"""
OpenID Connect Client Module

Talks to the identity provider for the redirect login flow: discovery,
authorization URLs with PKCE, code exchange, token refresh, ID token
verification and the end-session URL.

Key Features:
- Discovery document cached with a TTL
- Retries on transport errors (tenacity)
- ID tokens verified against the provider JWKS (python-jose)
"""
import base64
import hashlib
import secrets
import time
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

import httpx
from jose import jwt, JWTError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from ..db.schemas import OIDCUserData
from ..utils.config import settings
from ..utils.logger import auth_logger as logger

SCOPE = "openid email profile offline_access"
PROMPT = "login consent"


class OIDCError(Exception):
    """Raised when the provider rejects a request or returns a bad token."""


def generate_pkce_pair() -> Tuple[str, str]:
    """Return a PKCE ``(verifier, S256 challenge)`` pair."""
    verifier = secrets.token_urlsafe(64)
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    challenge = base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
    return verifier, challenge


def claims_to_user_data(claims: Dict[str, Any]) -> OIDCUserData:
    """
    Map ID token claims onto user fields.

    The display name is ``first_name last_name`` when both exist, then
    ``first_name``, then the username.
    """
    username = claims.get("username") or claims["sub"]
    first, last = claims.get("first_name"), claims.get("last_name")
    if first and last:
        name = f"{first} {last}"
    else:
        name = first or username

    return OIDCUserData(
        oidc_subject=str(claims["sub"]),
        username=username,
        email=claims.get("email") or f"{claims['sub']}@users.noreply",
        name=name,
        bio=claims.get("bio"),
        avatar_url=claims.get("profile_image_url"),
    )


class OIDCClient:
    """
    Client for one OpenID provider.

    ``transport`` is handed to every ``httpx.AsyncClient`` the client opens,
    which lets tests answer provider calls in-process.
    """

    def __init__(
        self,
        issuer_url: str,
        client_id: str,
        client_secret: Optional[str] = None,
        domains: Optional[List[str]] = None,
        discovery_ttl: int = 3600,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.issuer_url = issuer_url.rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret
        self.domains = domains or []
        self.discovery_ttl = discovery_ttl
        self.timeout = timeout
        self.transport = transport

        self._discovery: Optional[Dict[str, Any]] = None
        self._discovery_fetched_at = 0.0

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        reraise=True
    )
    async def _get_json(self, url: str) -> Dict[str, Any]:
        async with self._http() as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.json()

    async def _post_token(self, form: Dict[str, str]) -> Dict[str, Any]:
        config = await self.discover()
        form = {**form, "client_id": self.client_id}
        if self.client_secret:
            form["client_secret"] = self.client_secret

        async with self._http() as client:
            response = await client.post(config["token_endpoint"], data=form)

        if response.status_code != 200:
            logger.warning(f"Token endpoint returned {response.status_code}: {response.text[:200]}")
            raise OIDCError(f"Token request failed with status {response.status_code}")
        return response.json()

    async def discover(self) -> Dict[str, Any]:
        """Return the provider configuration, refetching once the TTL lapses."""
        now = time.monotonic()
        if self._discovery is not None and now - self._discovery_fetched_at < self.discovery_ttl:
            return self._discovery

        url = f"{self.issuer_url}/.well-known/openid-configuration"
        logger.info(f"Fetching OIDC discovery document: {url}")
        try:
            self._discovery = await self._get_json(url)
        except httpx.HTTPError as e:
            raise OIDCError(f"Discovery failed: {str(e)}") from e
        self._discovery_fetched_at = now
        return self._discovery

    async def authorization_url(self, redirect_uri: str, state: str, nonce: str, code_challenge: str) -> str:
        config = await self.discover()
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "scope": SCOPE,
            "prompt": PROMPT,
            "state": state,
            "nonce": nonce,
            "code_challenge": code_challenge,
            "code_challenge_method": "S256",
        }
        return f"{config['authorization_endpoint']}?{urlencode(params)}"

    async def exchange_code(self, code: str, redirect_uri: str, code_verifier: str) -> Dict[str, Any]:
        return await self._post_token({
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
            "code_verifier": code_verifier,
        })

    async def refresh(self, refresh_token: str) -> Dict[str, Any]:
        return await self._post_token({
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        })

    async def verify_id_token(
        self,
        id_token: str,
        nonce: Optional[str] = None,
        access_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Verify an ID token's signature, audience and issuer.

        Args:
            id_token: Compact JWT from the token endpoint
            nonce: Expected nonce, checked when given
            access_token: Used for the ``at_hash`` check when the claim is present

        Returns:
            The token claims

        Raises:
            OIDCError: if any check fails
        """
        config = await self.discover()
        try:
            jwks = await self._get_json(config["jwks_uri"])
        except httpx.HTTPError as e:
            raise OIDCError(f"Could not fetch JWKS: {str(e)}") from e

        algorithms = config.get("id_token_signing_alg_values_supported") or ["RS256"]
        try:
            claims = jwt.decode(
                id_token,
                jwks,
                algorithms=algorithms,
                audience=self.client_id,
                issuer=config.get("issuer", self.issuer_url),
                access_token=access_token,
            )
        except JWTError as e:
            raise OIDCError(f"Invalid ID token: {str(e)}") from e

        if nonce is not None and claims.get("nonce") != nonce:
            raise OIDCError("ID token nonce mismatch")
        return claims

    async def end_session_url(self, post_logout_redirect_uri: str) -> str:
        config = await self.discover()
        endpoint = config.get("end_session_endpoint") or f"{self.issuer_url}/session/end"
        params = {"client_id": self.client_id, "post_logout_redirect_uri": post_logout_redirect_uri}
        return f"{endpoint}?{urlencode(params)}"


def token_session(tokens: Dict[str, Any], claims: Dict[str, Any], previous: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build the ``oidc`` block kept in the session.

    A refresh response may omit the refresh token or the ID token; the
    previous values are kept in that case.
    """
    previous = previous or {}
    if tokens.get("id_token") and claims.get("exp"):
        expires_at = claims["exp"]
    elif tokens.get("expires_in"):
        expires_at = int(time.time()) + int(tokens["expires_in"])
    else:
        expires_at = claims.get("exp")

    return {
        "claims": claims,
        "access_token": tokens.get("access_token"),
        "refresh_token": tokens.get("refresh_token") or previous.get("refresh_token"),
        "expires_at": expires_at,
    }


_client: Optional[OIDCClient] = None


def get_oidc_client() -> Optional[OIDCClient]:
    """
    FastAPI dependency for the configured provider client.

    Returns None when no client id is configured.
    """
    global _client
    if not settings.oidc_enabled:
        return None
    if _client is None:
        _client = OIDCClient(
            settings.OIDC_ISSUER_URL,
            settings.OIDC_CLIENT_ID,
            client_secret=settings.OIDC_CLIENT_SECRET,
            domains=settings.oidc_domains,
            discovery_ttl=settings.OIDC_DISCOVERY_TTL_SECONDS,
        )
    return _client
