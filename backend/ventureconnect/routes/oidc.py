"""
OpenID Connect Routes Module

Redirect-based login against the configured identity provider. Every endpoint
answers 503 when no OIDC client id is configured; password login is
unaffected.
"""
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from ..db import schemas
from ..db.session import get_storage
from ..db.storage import Storage
from ..services.oidc import (
    OIDCClient, OIDCError, claims_to_user_data, generate_pkce_pair, get_oidc_client, token_session,
)
from ..services.sessions import SessionManager
from ..utils.logger import auth_logger as logger
from .auth import get_current_user, get_session_manager

router = APIRouter(prefix="/api", tags=["OpenID Connect"])


def require_oidc(client: Optional[OIDCClient] = Depends(get_oidc_client)) -> OIDCClient:
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="OpenID Connect login is not configured"
        )
    return client


@router.get("/login")
async def oidc_login(
    request: Request,
    client: OIDCClient = Depends(require_oidc),
    sessions: SessionManager = Depends(get_session_manager),
):
    """Start the authorization code flow for the requesting host."""
    host = request.url.hostname
    if host not in client.domains:
        logger.warning(f"OIDC login requested for unknown host: {host}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown login domain: {host}")

    verifier, challenge = generate_pkce_pair()
    flow = {
        "state": secrets.token_urlsafe(24),
        "nonce": secrets.token_urlsafe(24),
        "code_verifier": verifier,
        "redirect_uri": f"https://{host}/api/callback",
    }
    try:
        url = await client.authorization_url(flow["redirect_uri"], flow["state"], flow["nonce"], challenge)
    except OIDCError as e:
        logger.error(f"Could not build authorization URL: {str(e)}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Identity provider unavailable")

    response = RedirectResponse(url, status_code=status.HTTP_302_FOUND)
    await sessions.start(request, response, {"oidc_flow": flow})
    return response


@router.get("/callback")
async def oidc_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    client: OIDCClient = Depends(require_oidc),
    storage: Storage = Depends(get_storage),
    sessions: SessionManager = Depends(get_session_manager),
):
    """
    Finish the flow: check state, exchange the code, verify the ID token and
    log the linked user in. Any failure sends the browser back to login.
    """
    failure = RedirectResponse("/api/login", status_code=status.HTTP_302_FOUND)
    flow = (await sessions.load(request)).get("oidc_flow")
    if not flow or not code or state != flow.get("state"):
        logger.warning("OIDC callback with missing or mismatched state")
        return failure

    try:
        tokens = await client.exchange_code(code, flow["redirect_uri"], flow["code_verifier"])
        claims = await client.verify_id_token(
            tokens.get("id_token", ""), nonce=flow["nonce"], access_token=tokens.get("access_token")
        )
    except (OIDCError, KeyError, ValueError) as e:
        logger.warning(f"OIDC callback failed: {str(e)}")
        return failure

    try:
        user = await storage.upsert_oidc_user(claims_to_user_data(claims))
    except ValueError as e:
        logger.warning(f"OIDC user rejected for subject {claims.get('sub')}: {str(e)}")
        return failure
    except Exception as e:
        logger.error(f"Error storing OIDC user for subject {claims.get('sub')}: {str(e)}")
        return failure

    response = RedirectResponse("/", status_code=status.HTTP_302_FOUND)
    await sessions.start(request, response, {"user_id": user.id, "oidc": token_session(tokens, claims)})
    logger.info(f"OIDC login for user {user.id} (subject {claims['sub']})")
    return response


@router.get("/logout")
async def oidc_logout(
    request: Request,
    client: OIDCClient = Depends(require_oidc),
    sessions: SessionManager = Depends(get_session_manager),
):
    try:
        url = await client.end_session_url(f"{request.url.scheme}://{request.url.hostname}")
    except OIDCError as e:
        logger.error(f"Could not build end-session URL: {str(e)}")
        url = "/"

    response = RedirectResponse(url, status_code=status.HTTP_302_FOUND)
    await sessions.destroy(request, response)
    return response


@router.get("/auth/user", response_model=schemas.PublicUser, dependencies=[Depends(require_oidc)])
async def oidc_user(current_user: schemas.User = Depends(get_current_user)):
    return current_user.public()
