"""
Root conftest file for pytest.

This file is automatically loaded by pytest. It points uploads and logs at a
temporary directory before the application modules are imported, and provides
storage and API client fixtures.
"""
import os
import sys
import tempfile
from pathlib import Path

# Add the backend directory to the Python path for imports
backend_dir = str(Path(__file__).parent.parent)
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

_test_root = tempfile.mkdtemp(prefix="ventureconnect-tests-")
os.environ["UPLOAD_DIR"] = os.path.join(_test_root, "uploads")
os.environ["LOGS_DIR"] = os.path.join(_test_root, "logs")
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["OIDC_CLIENT_ID"] = ""

import time

import httpx
import pytest
from jose import jwk, jwt
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from ventureconnect.db.database import DatabaseStorage
from ventureconnect.db.memory import MemStorage
from ventureconnect.db.seed import SAMPLE_PASSWORD
from ventureconnect.db.session import build_session_factory, get_storage, init_db
from ventureconnect.main import app
from ventureconnect.services.oidc import OIDCClient, get_oidc_client
from ventureconnect.services.uploads import UploadService, get_upload_service


@pytest.fixture
def mem_storage():
    """Empty in-memory storage."""
    return MemStorage()


@pytest.fixture
def seeded_storage():
    """In-memory storage holding the sample network."""
    return MemStorage(seed_data=True)


@pytest.fixture
async def sqlite_storage():
    """DatabaseStorage on a private in-memory SQLite database."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    storage = DatabaseStorage(build_session_factory(engine), engine)
    yield storage
    await storage.close()


@pytest.fixture(params=["memory", "database"])
async def storage(request):
    """Run a test once per storage backend."""
    if request.param == "memory":
        yield MemStorage()
        return

    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    backend = DatabaseStorage(build_session_factory(engine), engine)
    yield backend
    await backend.close()


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def client(seeded_storage, upload_dir):
    """API client over the seeded in-memory network with OIDC disabled."""
    app.dependency_overrides[get_storage] = lambda: seeded_storage
    app.dependency_overrides[get_oidc_client] = lambda: None
    app.dependency_overrides[get_upload_service] = lambda: UploadService(str(upload_dir))
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    """Log the client in as a sample user and return the user payload."""
    def _login(username="alexmorgan", password=SAMPLE_PASSWORD):
        response = client.post("/api/auth/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        return response.json()
    return _login


@pytest.fixture
def alex(client, login):
    """Client logged in as the first sample user."""
    login("alexmorgan")
    return client


@pytest.fixture
def user_ids(seeded_storage):
    """Sample usernames mapped to their ids."""
    return {u.username: u.id for u in seeded_storage.users.values()}


class FakeProvider:
    """In-process OpenID provider served through ``httpx.MockTransport``."""

    issuer = "https://id.example.com"
    client_id = "ventureconnect-test"
    secret = "fake-provider-signing-secret-0123456789"

    def __init__(self):
        self.requests = []
        self.nonce = None
        self.claims = {
            "sub": "oidc-123",
            "username": "adal",
            "email": "ada@lovelace.dev",
            "first_name": "Ada",
            "last_name": "Lovelace",
            "profile_image_url": "https://img.example.com/ada.png",
        }
        self.token_status = 200

    @property
    def discovery(self):
        return {
            "issuer": self.issuer,
            "authorization_endpoint": f"{self.issuer}/auth",
            "token_endpoint": f"{self.issuer}/token",
            "jwks_uri": f"{self.issuer}/jwks",
            "end_session_endpoint": f"{self.issuer}/session/end",
            "id_token_signing_alg_values_supported": ["HS256"],
        }

    def id_token(self, **overrides):
        now = int(time.time())
        claims = {"aud": self.client_id, "iss": self.issuer, "iat": now, "exp": now + 3600, **self.claims}
        if self.nonce is not None:
            claims["nonce"] = self.nonce
        claims.update(overrides)
        return jwt.encode(claims, self.secret, algorithm="HS256")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/.well-known/openid-configuration":
            return httpx.Response(200, json=self.discovery)
        if path == "/jwks":
            return httpx.Response(200, json={"keys": [jwk.construct(self.secret, "HS256").to_dict()]})
        if path == "/token":
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "invalid_grant"})
            return httpx.Response(200, json={
                "access_token": "access-token",
                "refresh_token": "refresh-token",
                "id_token": self.id_token(),
                "token_type": "Bearer",
                "expires_in": 3600,
            })
        return httpx.Response(404)

    def paths(self):
        return [r.url.path for r in self.requests]

    def client(self, **kwargs):
        options = {"domains": ["testserver"], "transport": httpx.MockTransport(self.handler)}
        options.update(kwargs)
        return OIDCClient(self.issuer, self.client_id, client_secret="shh", **options)


@pytest.fixture
def provider():
    return FakeProvider()
