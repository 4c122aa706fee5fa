"""
API tests for user profiles, avatars and resource grids.
"""
import os

import pytest

from ventureconnect.db import schemas


def test_search_users(alex):
    everyone = alex.get("/api/users")
    assert everyone.status_code == 200
    assert len(everyone.json()) == 6
    assert all("password" not in u for u in everyone.json())

    investors = alex.get("/api/users", params={"q": "angel investor"})
    assert [u["username"] for u in investors.json()] == ["jessicawilson"]


def test_get_user(alex, user_ids):
    response = alex.get(f"/api/users/{user_ids['sarahwilliams']}")
    assert response.status_code == 200
    assert response.json()["company"] == "EcoTrack"

    missing = alex.get("/api/users/999")
    assert missing.status_code == 404
    assert missing.json()["error"]["message"] == "User not found"


def test_update_own_profile_recomputes_completion(client):
    user = client.post("/api/auth/register", json={
        "username": "fresh", "password": "pw", "email": "fresh@example.com",
        "name": "Fresh", "user_type": "investor",
    }).json()
    assert user["profile_completion"] == 25

    response = client.put(f"/api/users/{user['id']}", json={"bio": "Early stage", "location": "Austin"})

    assert response.status_code == 200
    body = response.json()
    assert body["bio"] == "Early stage"
    assert body["profile_completion"] == 55
    assert body["name"] == "Fresh"


def test_cannot_update_someone_else(alex, user_ids):
    response = alex.put(f"/api/users/{user_ids['davidkim']}", json={"bio": "hacked"})
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "You can only update your own profile"


def test_update_rejects_bad_user_type(alex, user_ids):
    response = alex.put(f"/api/users/{user_ids['alexmorgan']}", json={"user_type": "pirate"})
    assert response.status_code == 400


def test_update_rejects_null_for_required_fields(alex, user_ids, seeded_storage):
    response = alex.put(f"/api/users/{user_ids['alexmorgan']}", json={"name": None})

    assert response.status_code == 400
    assert seeded_storage.users[user_ids["alexmorgan"]].name == "Alex Morgan"
    assert alex.get(f"/api/users/{user_ids['alexmorgan']}").status_code == 200


def test_update_can_clear_optional_fields(alex, user_ids):
    response = alex.put(f"/api/users/{user_ids['alexmorgan']}", json={"bio": None})

    assert response.status_code == 200
    assert response.json()["bio"] is None
    assert response.json()["profile_completion"] == 85


def test_avatar_upload_replaces_previous_file(alex, user_ids, upload_dir):
    url = f"/api/users/{user_ids['alexmorgan']}/avatar"

    first = alex.post(url, files={"avatar": ("me.png", b"\x89PNG first", "image/png")})
    assert first.status_code == 200
    first_url = first.json()["avatar_url"]
    assert first_url.startswith("/uploads/avatar-")
    assert os.listdir(upload_dir) == [os.path.basename(first_url)]

    second = alex.post(url, files={"avatar": ("me.webp", b"RIFF second", "image/webp")})
    assert second.status_code == 200
    second_url = second.json()["avatar_url"]
    assert second_url != first_url
    assert os.listdir(upload_dir) == [os.path.basename(second_url)]


def test_avatar_upload_rejects_non_image(alex, user_ids):
    response = alex.post(
        f"/api/users/{user_ids['alexmorgan']}/avatar",
        files={"avatar": ("notes.txt", b"hello", "text/plain")},
    )
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Only image files are allowed"


def test_avatar_upload_size_limit(alex, user_ids, seeded_storage):
    too_big = b"x" * (5 * 1024 * 1024 + 1)
    response = alex.post(
        f"/api/users/{user_ids['alexmorgan']}/avatar",
        files={"avatar": ("big.png", too_big, "image/png")},
    )
    assert response.status_code == 413
    assert seeded_storage.users[user_ids["alexmorgan"]].avatar_url.startswith("https://")


def test_avatar_upload_for_someone_else(alex, user_ids):
    response = alex.post(
        f"/api/users/{user_ids['davidkim']}/avatar",
        files={"avatar": ("me.png", b"img", "image/png")},
    )
    assert response.status_code == 403


def test_resource_grid(alex, user_ids):
    grid = alex.get(f"/api/users/{user_ids['alexmorgan']}/resource-grid").json()
    assert set(grid) == set(schemas.RESOURCE_CATEGORIES)
    assert grid["legal_expertise"] == {"have": [], "need": ["IP Protection", "Contract Negotiation"]}

    empty = alex.get(f"/api/users/{user_ids['davidkim']}/resource-grid").json()
    assert set(empty) == set(schemas.RESOURCE_CATEGORIES)
    assert all(cell == {"have": [], "need": []} for cell in empty.values())


@pytest.mark.parametrize("path", ["/api/users", "/api/users/1", "/api/users/1/resource-grid"])
def test_user_routes_require_auth(client, path):
    assert client.get(path).status_code == 401
