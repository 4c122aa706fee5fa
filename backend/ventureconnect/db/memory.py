"""
In-Memory Storage Module

Dict-backed implementation of the Storage interface, used for local
development and tests. Records are Pydantic schema instances; updates replace
them with modified copies so callers never share mutable state with the store.
"""
from datetime import datetime
from itertools import count
from typing import Any, Dict, List, Optional, Tuple

from . import schemas, seed
from .storage import Storage
from ..services.passwords import hash_password
from ..utils.logger import storage_logger as logger


def _matches(query: str, *values) -> bool:
    for value in values:
        if isinstance(value, list):
            if any(query in item.lower() for item in value):
                return True
        elif value and query in value.lower():
            return True
    return False


class MemStorage(Storage):
    """Storage backed by one dict per entity, with per-entity id counters."""

    def __init__(self, seed_data: bool = False):
        self.users: Dict[int, schemas.User] = {}
        self.projects: Dict[int, schemas.Project] = {}
        self.resources: Dict[int, schemas.Resource] = {}
        self.skills: Dict[int, schemas.Skill] = {}
        self.posts: Dict[int, schemas.Post] = {}
        self.connections: Dict[int, schemas.Connection] = {}
        self.messages: Dict[int, schemas.Message] = {}
        self.sessions: Dict[str, Tuple[Dict[str, Any], datetime]] = {}
        self._ids = {name: count(1) for name in (
            "users", "projects", "resources", "skills", "posts", "connections", "messages"
        )}

        if seed_data:
            self.seed()

    def _insert(self, table: str, model, data: Dict[str, Any]):
        record_id = next(self._ids[table])
        fields = {"created_at": datetime.utcnow(), **data, "id": record_id}
        record = model(**fields)
        getattr(self, table)[record_id] = record
        return record

    def _update(self, table: str, record_id: int, data: Dict[str, Any]):
        records = getattr(self, table)
        record = records.get(record_id)
        if record is None:
            return None
        updated = record.model_copy(update={k: v for k, v in data.items() if k != "id"})
        records[record_id] = updated
        return updated

    # User operations
    async def get_user(self, user_id: int) -> Optional[schemas.User]:
        return self.users.get(user_id)

    async def get_user_by_username(self, username: str) -> Optional[schemas.User]:
        username = username.lower()
        return next((u for u in self.users.values() if u.username.lower() == username), None)

    async def get_user_by_email(self, email: str) -> Optional[schemas.User]:
        email = email.lower()
        return next((u for u in self.users.values() if u.email.lower() == email), None)

    async def get_user_by_oidc_subject(self, subject: str) -> Optional[schemas.User]:
        return next((u for u in self.users.values() if u.oidc_subject == subject), None)

    async def create_user(self, data: Dict[str, Any]) -> schemas.User:
        return self._insert("users", schemas.User, data)

    async def update_user(self, user_id: int, data: Dict[str, Any]) -> Optional[schemas.User]:
        return self._update("users", user_id, data)

    async def search_users(self, query: str) -> List[schemas.User]:
        if not query:
            return list(self.users.values())
        query = query.lower()
        return [
            u for u in self.users.values()
            if _matches(query, u.name, u.username, u.bio, u.headline, u.company)
        ]

    # Project operations
    async def get_project(self, project_id: int) -> Optional[schemas.Project]:
        return self.projects.get(project_id)

    async def get_projects_by_user_id(self, user_id: int) -> List[schemas.Project]:
        return [p for p in self.projects.values() if p.user_id == user_id]

    async def create_project(self, data: Dict[str, Any]) -> schemas.Project:
        return self._insert("projects", schemas.Project, data)

    async def update_project(self, project_id: int, data: Dict[str, Any]) -> Optional[schemas.Project]:
        return self._update("projects", project_id, data)

    async def delete_project(self, project_id: int) -> bool:
        return self.projects.pop(project_id, None) is not None

    async def search_projects(self, query: str) -> List[schemas.Project]:
        if not query:
            return list(self.projects.values())
        query = query.lower()
        return [
            p for p in self.projects.values()
            if _matches(query, p.title, p.description, p.looking_for, p.tags)
        ]

    # Resource operations
    async def get_resources_by_user_id(self, user_id: int) -> List[schemas.Resource]:
        return [r for r in self.resources.values() if r.user_id == user_id]

    async def create_resource(self, data: Dict[str, Any]) -> schemas.Resource:
        return self._insert("resources", schemas.Resource, data)

    async def update_resource(self, resource_id: int, data: Dict[str, Any]) -> Optional[schemas.Resource]:
        return self._update("resources", resource_id, data)

    # Skill operations
    async def get_skills_by_user_id(self, user_id: int) -> List[schemas.Skill]:
        return [s for s in self.skills.values() if s.user_id == user_id]

    async def create_skill(self, data: Dict[str, Any]) -> schemas.Skill:
        return self._insert("skills", schemas.Skill, data)

    async def update_skill(self, skill_id: int, data: Dict[str, Any]) -> Optional[schemas.Skill]:
        return self._update("skills", skill_id, data)

    async def delete_skill(self, skill_id: int) -> bool:
        return self.skills.pop(skill_id, None) is not None

    # Post operations
    async def get_post(self, post_id: int) -> Optional[schemas.Post]:
        return self.posts.get(post_id)

    async def get_feed_posts(self) -> List[Tuple[schemas.Post, schemas.User]]:
        feed = []
        for post in sorted(self.posts.values(), key=lambda p: (p.created_at, p.id), reverse=True):
            author = self.users.get(post.user_id)
            if author is None:
                logger.warning(f"Skipping post {post.id}: author {post.user_id} not found")
                continue
            feed.append((post, author))
        return feed

    async def get_posts_by_user_id(self, user_id: int) -> List[schemas.Post]:
        posts = [p for p in self.posts.values() if p.user_id == user_id]
        return sorted(posts, key=lambda p: (p.created_at, p.id), reverse=True)

    async def create_post(self, data: Dict[str, Any]) -> schemas.Post:
        return self._insert("posts", schemas.Post, data)

    async def delete_post(self, post_id: int) -> bool:
        return self.posts.pop(post_id, None) is not None

    # Connection operations
    async def get_connection(self, connection_id: int) -> Optional[schemas.Connection]:
        return self.connections.get(connection_id)

    async def get_connections(self, user_id: int) -> List[schemas.Connection]:
        return [
            c for c in self.connections.values()
            if user_id in (c.requester_id, c.recipient_id) and c.status == "accepted"
        ]

    async def get_pending_connections(self, user_id: int) -> List[schemas.Connection]:
        return [
            c for c in self.connections.values()
            if c.recipient_id == user_id and c.status == "pending"
        ]

    async def get_outgoing_pending_connections(self, user_id: int) -> List[schemas.Connection]:
        return [
            c for c in self.connections.values()
            if c.requester_id == user_id and c.status == "pending"
        ]

    async def create_connection(self, data: Dict[str, Any]) -> schemas.Connection:
        return self._insert("connections", schemas.Connection, data)

    async def update_connection_status(self, connection_id: int, status: str) -> Optional[schemas.Connection]:
        return self._update("connections", connection_id, {"status": status})

    # Message operations
    async def get_messages_between_users(self, user_id1: int, user_id2: int) -> List[schemas.Message]:
        pair = {(user_id1, user_id2), (user_id2, user_id1)}
        thread = [m for m in self.messages.values() if (m.sender_id, m.recipient_id) in pair]
        return sorted(thread, key=lambda m: (m.created_at, m.id))

    async def get_messages_by_user_id(self, user_id: int) -> List[schemas.Message]:
        mine = [m for m in self.messages.values() if user_id in (m.sender_id, m.recipient_id)]
        return sorted(mine, key=lambda m: (m.created_at, m.id), reverse=True)

    async def get_unread_message_count(self, user_id: int) -> int:
        return sum(1 for m in self.messages.values() if m.recipient_id == user_id and not m.is_read)

    async def create_message(self, data: Dict[str, Any]) -> schemas.Message:
        return self._insert("messages", schemas.Message, data)

    async def mark_message_as_read(self, message_id: int) -> Optional[schemas.Message]:
        return self._update("messages", message_id, {"is_read": True})

    # Session operations
    async def create_session(self, sid: str, data: Dict[str, Any], expires_at: datetime) -> None:
        self.sessions[sid] = (dict(data), expires_at)

    async def get_session(self, sid: str) -> Optional[Dict[str, Any]]:
        entry = self.sessions.get(sid)
        if entry is None:
            return None
        data, expires_at = entry
        if expires_at <= datetime.utcnow():
            del self.sessions[sid]
            return None
        return dict(data)

    async def update_session(self, sid: str, data: Dict[str, Any], expires_at: Optional[datetime] = None) -> bool:
        entry = self.sessions.get(sid)
        if entry is None:
            return False
        self.sessions[sid] = (dict(data), expires_at or entry[1])
        return True

    async def delete_session(self, sid: str) -> bool:
        return self.sessions.pop(sid, None) is not None

    def seed(self) -> None:
        """Load the sample network from ``seed``."""
        password = hash_password(seed.SAMPLE_PASSWORD)
        by_username = {}
        for fields in seed.SAMPLE_USERS:
            user = self._insert("users", schemas.User, {**fields, "password": password})
            by_username[user.username] = user.id

        for owner, fields in seed.SAMPLE_PROJECTS:
            self._insert("projects", schemas.Project, {**fields, "user_id": by_username[owner]})

        for category, (have, need) in seed.SAMPLE_RESOURCE_GRID.items():
            self._insert("resources", schemas.Resource, {
                "user_id": by_username["alexmorgan"], "category": category, "have": have, "need": need,
            })

        for owner, name, rating in seed.SAMPLE_SKILLS:
            self._insert("skills", schemas.Skill, {"user_id": by_username[owner], "name": name, "rating": rating})

        for author, content, tags, post_type, age in seed.SAMPLE_POSTS:
            self._insert("posts", schemas.Post, {
                "user_id": by_username[author], "content": content, "tags": tags,
                "type": post_type, "created_at": seed.ago(age),
            })

        for requester, recipient, status, age in seed.SAMPLE_CONNECTIONS:
            self._insert("connections", schemas.Connection, {
                "requester_id": by_username[requester], "recipient_id": by_username[recipient],
                "status": status, "created_at": seed.ago(age),
            })

        for sender, recipient, content, is_read, age in seed.SAMPLE_MESSAGES:
            self._insert("messages", schemas.Message, {
                "sender_id": by_username[sender], "recipient_id": by_username[recipient],
                "content": content, "is_read": is_read, "created_at": seed.ago(age),
            })

        logger.info(f"Seeded in-memory storage with {len(self.users)} users")
