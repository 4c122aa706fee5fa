"""
Authentication Routes Module

This module handles username/password authentication and the dependencies
that gate every protected route.

Key Features:
- Registration, login and logout over server-side sessions
- JWT bearer tokens for API clients
- A single current-user dependency covering sessions, OIDC sessions and bearer tokens
"""

from fastapi import APIRouter, Depends, HTTPException, status, Request, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from datetime import datetime, timedelta
from jose import JWTError, jwt
from typing import Optional
import time

from ..db import schemas
from ..db.session import get_storage
from ..db.storage import Storage
from ..services.oidc import OIDCClient, OIDCError, get_oidc_client, token_session
from ..services.passwords import hash_password, verify_password
from ..services.profile import compute_profile_completion
from ..services.sessions import SessionManager
from ..utils.config import settings
from ..utils.logger import auth_logger as logger

bearer_scheme = HTTPBearer(auto_error=False)

# Initialize router
router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def get_session_manager(storage: Storage = Depends(get_storage)) -> SessionManager:
    return SessionManager(storage)


def unauthorized(detail: str = "Unauthorized") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# JWT token operations for API clients
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a JWT carrying ``data`` plus an expiry."""
    if not data or "sub" not in data:
        raise ValueError("Invalid token data")

    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.API_ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.API_SECRET_KEY, algorithm=settings.API_ALGORITHM)


def decode_access_token(token: str) -> Optional[int]:
    """Return the user id carried by a valid token, or None."""
    try:
        payload = jwt.decode(token, settings.API_SECRET_KEY, algorithms=[settings.API_ALGORITHM])
        return int(payload["sub"])
    except (JWTError, KeyError, ValueError):
        return None


async def _refresh_oidc_session(
    request: Request, data: dict, sessions: SessionManager, client: Optional[OIDCClient]
) -> None:
    oidc = data["oidc"]
    refresh_token = oidc.get("refresh_token")
    if not refresh_token or client is None:
        logger.info("OIDC session expired with no way to refresh")
        raise unauthorized()

    try:
        tokens = await client.refresh(refresh_token)
        claims = oidc.get("claims") or {}
        if tokens.get("id_token"):
            claims = await client.verify_id_token(tokens["id_token"], access_token=tokens.get("access_token"))
    except OIDCError as e:
        logger.warning(f"OIDC token refresh failed: {str(e)}")
        raise unauthorized()

    data["oidc"] = token_session(tokens, claims, previous=oidc)
    await sessions.save(request, data)
    logger.info(f"OIDC tokens refreshed for subject {claims.get('sub')}")


async def session_user_id(
    request: Request, data: dict, sessions: SessionManager, client: Optional[OIDCClient]
) -> Optional[int]:
    """
    User id bound to a loaded session, or None.

    An OIDC session is refreshed first when its tokens expired.

    Raises:
        HTTPException(401): if an OIDC session has no expiry or cannot be refreshed
    """
    if data.get("oidc"):
        expires_at = data["oidc"].get("expires_at")
        if not expires_at:
            raise unauthorized()
        if time.time() > expires_at:
            await _refresh_oidc_session(request, data, sessions, client)
    return data.get("user_id")


async def get_current_user(
    request: Request,
    storage: Storage = Depends(get_storage),
    sessions: SessionManager = Depends(get_session_manager),
    oidc_client: Optional[OIDCClient] = Depends(get_oidc_client),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> schemas.User:
    """
    Resolve the authenticated user.

    Checked in order: an OIDC session (refreshed when its tokens expired), a
    password session, then an ``Authorization: Bearer`` token.

    Raises:
        HTTPException(401): if none of them identifies an existing user
    """
    data = await sessions.load(request)
    user_id = await session_user_id(request, data, sessions, oidc_client)

    if user_id is None and credentials is not None and credentials.scheme.lower() == "bearer":
        user_id = decode_access_token(credentials.credentials)

    if user_id is None:
        raise unauthorized()

    user = await storage.get_user(user_id)
    if user is None:
        logger.warning(f"Authenticated user {user_id} no longer exists")
        raise unauthorized()
    return user


async def _check_credentials(storage: Storage, credentials: schemas.LoginRequest) -> schemas.User:
    if not credentials.username or not credentials.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username and password are required"
        )

    user = await storage.get_user_by_username(credentials.username)
    if user is None or not verify_password(credentials.password, user.password):
        logger.warning(f"Failed login for username: {credentials.username}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return user


@router.post("/register", response_model=schemas.PublicUser, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: schemas.UserCreate,
    request: Request,
    response: Response,
    storage: Storage = Depends(get_storage),
    sessions: SessionManager = Depends(get_session_manager),
):
    """
    Create an account and log it in.

    Raises:
        HTTPException(400): if the username or email is taken
    """
    if await storage.get_user_by_username(user_data.username):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already taken")
    if await storage.get_user_by_email(user_data.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")

    fields = user_data.model_dump()
    fields["password"] = hash_password(user_data.password)
    fields["profile_completion"] = compute_profile_completion(fields)
    user = await storage.create_user(fields)

    await sessions.start(request, response, {"user_id": user.id})
    logger.info(f"Registered user {user.id} ({user.username})")
    return user.public()


@router.post("/login", response_model=schemas.PublicUser)
async def login(
    credentials: schemas.LoginRequest,
    request: Request,
    response: Response,
    storage: Storage = Depends(get_storage),
    sessions: SessionManager = Depends(get_session_manager),
):
    user = await _check_credentials(storage, credentials)
    await sessions.start(request, response, {"user_id": user.id})
    logger.info(f"User {user.id} logged in")
    return user.public()


@router.post("/logout", response_model=schemas.StatusMessage)
async def logout(
    request: Request,
    response: Response,
    sessions: SessionManager = Depends(get_session_manager),
):
    await sessions.destroy(request, response)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=schemas.PublicUser)
async def me(
    request: Request,
    storage: Storage = Depends(get_storage),
    sessions: SessionManager = Depends(get_session_manager),
    oidc_client: Optional[OIDCClient] = Depends(get_oidc_client),
):
    """Return the user bound to the session cookie."""
    data = await sessions.load(request)
    user_id = await session_user_id(request, data, sessions, oidc_client)
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    user = await storage.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user.public()


@router.post("/token", response_model=schemas.Token)
async def login_for_access_token(
    credentials: schemas.LoginRequest,
    storage: Storage = Depends(get_storage),
):
    """Exchange username and password for a bearer token."""
    user = await _check_credentials(storage, credentials)
    access_token = create_access_token(
        data={"sub": str(user.id)},
        expires_delta=timedelta(minutes=settings.API_ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    logger.info(f"JWT token created for user {user.id}")
    return {"access_token": access_token, "token_type": "bearer"}
