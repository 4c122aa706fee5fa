"""
API tests for the application shell: root, health and error envelopes.
"""


def test_root(client):
    body = client.get("/").json()
    assert body["name"] == "VentureConnect"
    assert body["health"] == "/health"


def test_health_reports_memory_backend(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["components"]["storage"] == {"backend": "memory", "status": "connected"}
    assert body["components"]["oidc"] == {"status": "disabled"}


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/nowhere")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == 404
    assert response.json()["error"]["type"] == "http_error"


def test_unauthorized_carries_bearer_challenge(client):
    response = client.get("/api/feed")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"

