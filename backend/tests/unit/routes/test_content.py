"""
API tests for projects, resources, skills and posts.
"""
import pytest

NEW_PROJECT = {
    "title": "Climate Ledger",
    "description": "Carbon accounting for small factories",
    "status": "planning",
    "tags": ["Green Tech"],
}


# Projects

def test_search_projects(alex):
    everything = alex.get("/api/projects").json()
    assert len(everything) == 3

    fintech = alex.get("/api/projects", params={"q": "fintech"}).json()
    assert [p["title"] for p in fintech] == ["InvestorMatch Platform"]


def test_user_projects(alex, user_ids):
    titles = [p["title"] for p in alex.get(f"/api/users/{user_ids['alexmorgan']}/projects").json()]
    assert sorted(titles) == ["InvestorMatch Platform", "TechSprint Mobile App"]
    assert alex.get(f"/api/users/{user_ids['davidkim']}/projects").json() == []


def test_create_update_delete_project(alex, user_ids):
    created = alex.post("/api/projects", json=NEW_PROJECT)
    assert created.status_code == 201
    project = created.json()
    assert project["user_id"] == user_ids["alexmorgan"]
    assert project["looking_for"] is None

    updated = alex.put(f"/api/projects/{project['id']}", json={"status": "active"})
    assert updated.status_code == 200
    assert updated.json()["status"] == "active"
    assert updated.json()["title"] == "Climate Ledger"

    deleted = alex.delete(f"/api/projects/{project['id']}")
    assert deleted.json() == {"message": "Project deleted successfully"}
    assert alex.delete(f"/api/projects/{project['id']}").status_code == 404


def test_project_validation(alex):
    response = alex.post("/api/projects", json={**NEW_PROJECT, "status": "abandoned"})
    assert response.status_code == 400
    assert response.json()["error"]["type"] == "validation_error"


def test_project_ownership(alex, seeded_storage, user_ids):
    sarahs = [p for p in seeded_storage.projects.values() if p.user_id == user_ids["sarahwilliams"]]
    project_id = sarahs[0].id

    update = alex.put(f"/api/projects/{project_id}", json={"title": "Mine now"})
    assert update.status_code == 403
    assert update.json()["error"]["message"] == "You can only update your own projects"

    delete = alex.delete(f"/api/projects/{project_id}")
    assert delete.status_code == 403
    assert delete.json()["error"]["message"] == "You can only delete your own projects"

    assert alex.put("/api/projects/999", json={"title": "x"}).status_code == 404


def test_update_rejects_null_for_required_fields(alex, seeded_storage, user_ids):
    project = alex.post("/api/projects", json=NEW_PROJECT).json()
    resource = alex.post("/api/resources", json={"category": "money", "have": ["Grant"]}).json()
    skill = alex.post("/api/skills", json={"name": "Fundraising", "rating": 60}).json()

    assert alex.put(f"/api/projects/{project['id']}", json={"title": None}).status_code == 400
    assert alex.put(f"/api/resources/{resource['id']}", json={"have": None}).status_code == 400
    assert alex.put(f"/api/skills/{skill['id']}", json={"rating": None}).status_code == 400

    assert seeded_storage.projects[project["id"]].title == "Climate Ledger"
    assert seeded_storage.resources[resource["id"]].have == ["Grant"]
    assert seeded_storage.skills[skill["id"]].rating == 60
    grid = alex.get(f"/api/users/{user_ids['alexmorgan']}/resource-grid")
    assert grid.status_code == 200


def test_project_looking_for_can_be_cleared(alex):
    project = alex.post("/api/projects", json={**NEW_PROJECT, "looking_for": "CTO"}).json()

    response = alex.put(f"/api/projects/{project['id']}", json={"looking_for": None})

    assert response.status_code == 200
    assert response.json()["looking_for"] is None


# Resources

def test_resources(alex, user_ids):
    rows = alex.get(f"/api/users/{user_ids['alexmorgan']}/resources").json()
    assert len(rows) == 7

    created = alex.post("/api/resources", json={"category": "money", "have": ["Grant"]})
    assert created.status_code == 201
    resource = created.json()
    assert resource["need"] == []

    updated = alex.put(f"/api/resources/{resource['id']}", json={"need": ["Bridge Loan"]})
    assert updated.status_code == 200
    assert updated.json()["have"] == ["Grant"]
    assert updated.json()["need"] == ["Bridge Loan"]

    grid = alex.get(f"/api/users/{user_ids['alexmorgan']}/resource-grid").json()
    assert grid["money"]["have"] == ["Seed Investment Experience", "Grant"]


def test_resource_of_other_user_is_not_found(alex, login, user_ids):
    login("davidkim")
    theirs = alex.post("/api/resources", json={"category": "tech_skills", "have": ["Python"]}).json()
    login("alexmorgan")

    response = alex.put(f"/api/resources/{theirs['id']}", json={"have": []})
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Resource not found"


def test_resource_category_validated(alex):
    assert alex.post("/api/resources", json={"category": "snacks"}).status_code == 400


# Skills

def test_skills_crud(alex, user_ids):
    skills = alex.get(f"/api/users/{user_ids['alexmorgan']}/skills").json()
    assert [s["name"] for s in skills][:1] == ["Product Management"]
    assert len(skills) == 4

    created = alex.post("/api/skills", json={"name": "Fundraising", "rating": 60})
    assert created.status_code == 201
    skill_id = created.json()["id"]

    updated = alex.put(f"/api/skills/{skill_id}", json={"rating": 70})
    assert updated.json() == {**created.json(), "rating": 70}

    deleted = alex.delete(f"/api/skills/{skill_id}")
    assert deleted.json() == {"message": "Skill deleted successfully"}
    assert alex.delete(f"/api/skills/{skill_id}").status_code == 404


@pytest.mark.parametrize("rating", [-1, 101])
def test_skill_rating_bounds(alex, rating):
    assert alex.post("/api/skills", json={"name": "Chess", "rating": rating}).status_code == 400


def test_cannot_touch_other_users_skill(alex, login):
    login("davidkim")
    theirs = alex.post("/api/skills", json={"name": "Go", "rating": 90}).json()
    login("alexmorgan")

    assert alex.put(f"/api/skills/{theirs['id']}", json={"rating": 10}).status_code == 404
    assert alex.delete(f"/api/skills/{theirs['id']}").status_code == 404


# Posts

def test_feed_includes_authors_newest_first(alex):
    feed = alex.get("/api/feed").json()

    assert [p["user"]["username"] for p in feed] == ["michaelfoster", "sarahwilliams"]
    assert "password" not in feed[0]["user"]

    alex.post("/api/posts", json={"content": "We shipped!", "type": "update", "tags": ["Launch"]})
    feed = alex.get("/api/feed").json()
    assert feed[0]["content"] == "We shipped!"
    assert feed[0]["user"]["username"] == "alexmorgan"


def test_user_posts(alex, user_ids):
    posts = alex.get(f"/api/users/{user_ids['sarahwilliams']}/posts").json()
    assert len(posts) == 1
    assert posts[0]["type"] == "update"


def test_post_validation(alex):
    assert alex.post("/api/posts", json={"content": "", "type": "update"}).status_code == 400
    assert alex.post("/api/posts", json={"content": "hi", "type": "rant"}).status_code == 400


def test_delete_post(alex, user_ids):
    post = alex.post("/api/posts", json={"content": "Temporary", "type": "update"}).json()

    response = alex.delete(f"/api/posts/{post['id']}")
    assert response.json() == {"message": "Post deleted successfully"}
    assert alex.delete(f"/api/posts/{post['id']}").status_code == 404


def test_cannot_delete_someone_elses_post(alex, seeded_storage, user_ids):
    michaels = [p for p in seeded_storage.posts.values() if p.user_id == user_ids["michaelfoster"]]

    response = alex.delete(f"/api/posts/{michaels[0].id}")

    assert response.status_code == 403
    assert response.json()["error"]["message"] == "You can only delete your own posts"
