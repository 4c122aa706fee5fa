"""
Session Service Module

Cookie-bound server-side sessions kept in the configured Storage. Both login
schemes write here: the password flow stores ``user_id``; the OIDC flow stores
``user_id`` plus an ``oidc`` block holding claims and tokens.
"""
import secrets
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from fastapi import Request, Response

from ..db.storage import Storage
from ..utils.config import settings
from ..utils.logger import auth_logger as logger


class SessionManager:
    """Create, load, save and destroy sessions for one request."""

    def __init__(
        self,
        storage: Storage,
        cookie_name: str = settings.SESSION_COOKIE_NAME,
        ttl_seconds: int = settings.SESSION_TTL_SECONDS,
        secure: bool = settings.SESSION_COOKIE_SECURE,
    ):
        self.storage = storage
        self.cookie_name = cookie_name
        self.ttl = timedelta(seconds=ttl_seconds)
        self.secure = secure

    def _expiry(self) -> datetime:
        return datetime.utcnow() + self.ttl

    def session_id(self, request: Request) -> Optional[str]:
        return request.cookies.get(self.cookie_name)

    async def load(self, request: Request) -> Dict[str, Any]:
        """Return the request's session data, or an empty dict."""
        sid = self.session_id(request)
        if not sid:
            return {}
        return await self.storage.get_session(sid) or {}

    async def start(self, request: Request, response: Response, data: Dict[str, Any]) -> str:
        """
        Open a fresh session and set its cookie.

        Any session already bound to the request is discarded, so a login
        always gets a new id.
        """
        previous = self.session_id(request)
        if previous:
            await self.storage.delete_session(previous)

        sid = secrets.token_urlsafe(32)
        await self.storage.create_session(sid, data, self._expiry())
        response.set_cookie(
            self.cookie_name,
            sid,
            max_age=int(self.ttl.total_seconds()),
            httponly=True,
            secure=self.secure,
            samesite="lax",
            path="/",
        )
        logger.debug(f"Session started: {sid[:8]}...")
        return sid

    async def save(self, request: Request, data: Dict[str, Any]) -> bool:
        """Persist new data for the request's existing session."""
        sid = self.session_id(request)
        if not sid:
            return False
        return await self.storage.update_session(sid, data, self._expiry())

    async def destroy(self, request: Request, response: Response) -> None:
        sid = self.session_id(request)
        if sid:
            await self.storage.delete_session(sid)
        response.delete_cookie(self.cookie_name, path="/", secure=self.secure, samesite="lax")
