"""
Storage Interface Module

Defines the async storage contract used by every route. Two implementations
exist: MemStorage (dict-backed, for development and tests) and
DatabaseStorage (SQLAlchemy). Both return the Pydantic schemas from
``schemas`` so callers never see ORM rows.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from . import schemas
from ..services.profile import compute_profile_completion


class Storage(ABC):
    """Abstract storage backend."""

    # User operations
    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[schemas.User]: ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[schemas.User]: ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[schemas.User]: ...

    @abstractmethod
    async def get_user_by_oidc_subject(self, subject: str) -> Optional[schemas.User]: ...

    @abstractmethod
    async def create_user(self, data: Dict[str, Any]) -> schemas.User: ...

    @abstractmethod
    async def update_user(self, user_id: int, data: Dict[str, Any]) -> Optional[schemas.User]: ...

    @abstractmethod
    async def search_users(self, query: str) -> List[schemas.User]: ...

    async def upsert_oidc_user(self, data: schemas.OIDCUserData) -> schemas.User:
        """
        Create or refresh the user linked to an OIDC subject.

        Accounts are matched by subject only. A username already held by
        someone else gets the subject appended so the unique constraint holds.
        An email held by another account is never copied onto this one.

        Raises:
            ValueError: if a new subject presents an email another account owns
        """
        fields = data.model_dump()
        user = await self.get_user_by_oidc_subject(data.oidc_subject)

        holder = await self.get_user_by_username(data.username)
        if holder is not None and (user is None or holder.id != user.id):
            fields["username"] = f"{data.username}-{data.oidc_subject}"

        email_holder = await self.get_user_by_email(data.email)
        if email_holder is not None and (user is None or email_holder.id != user.id):
            if user is None:
                raise ValueError(f"Email already registered to user {email_holder.id}")
            fields["email"] = None

        if user is not None:
            # Claims overwrite profile fields; absent claims and user_type stay local
            updates = {k: v for k, v in fields.items() if v is not None and k != "user_type"}
            merged = user.model_copy(update=updates)
            updates["profile_completion"] = compute_profile_completion(merged)
            return await self.update_user(user.id, updates)

        fields["profile_completion"] = compute_profile_completion(fields)
        return await self.create_user(fields)

    # Project operations
    @abstractmethod
    async def get_project(self, project_id: int) -> Optional[schemas.Project]: ...

    @abstractmethod
    async def get_projects_by_user_id(self, user_id: int) -> List[schemas.Project]: ...

    @abstractmethod
    async def create_project(self, data: Dict[str, Any]) -> schemas.Project: ...

    @abstractmethod
    async def update_project(self, project_id: int, data: Dict[str, Any]) -> Optional[schemas.Project]: ...

    @abstractmethod
    async def delete_project(self, project_id: int) -> bool: ...

    @abstractmethod
    async def search_projects(self, query: str) -> List[schemas.Project]: ...

    # Resource operations
    @abstractmethod
    async def get_resources_by_user_id(self, user_id: int) -> List[schemas.Resource]: ...

    @abstractmethod
    async def create_resource(self, data: Dict[str, Any]) -> schemas.Resource: ...

    @abstractmethod
    async def update_resource(self, resource_id: int, data: Dict[str, Any]) -> Optional[schemas.Resource]: ...

    # Skill operations
    @abstractmethod
    async def get_skills_by_user_id(self, user_id: int) -> List[schemas.Skill]: ...

    @abstractmethod
    async def create_skill(self, data: Dict[str, Any]) -> schemas.Skill: ...

    @abstractmethod
    async def update_skill(self, skill_id: int, data: Dict[str, Any]) -> Optional[schemas.Skill]: ...

    @abstractmethod
    async def delete_skill(self, skill_id: int) -> bool: ...

    # Post operations
    @abstractmethod
    async def get_post(self, post_id: int) -> Optional[schemas.Post]: ...

    @abstractmethod
    async def get_feed_posts(self) -> List[Tuple[schemas.Post, schemas.User]]: ...

    @abstractmethod
    async def get_posts_by_user_id(self, user_id: int) -> List[schemas.Post]: ...

    @abstractmethod
    async def create_post(self, data: Dict[str, Any]) -> schemas.Post: ...

    @abstractmethod
    async def delete_post(self, post_id: int) -> bool: ...

    # Connection operations
    @abstractmethod
    async def get_connection(self, connection_id: int) -> Optional[schemas.Connection]: ...

    @abstractmethod
    async def get_connections(self, user_id: int) -> List[schemas.Connection]: ...

    @abstractmethod
    async def get_pending_connections(self, user_id: int) -> List[schemas.Connection]: ...

    @abstractmethod
    async def get_outgoing_pending_connections(self, user_id: int) -> List[schemas.Connection]: ...

    @abstractmethod
    async def create_connection(self, data: Dict[str, Any]) -> schemas.Connection: ...

    @abstractmethod
    async def update_connection_status(self, connection_id: int, status: str) -> Optional[schemas.Connection]: ...

    async def get_connection_count(self, user_id: int) -> int:
        return len(await self.get_connections(user_id))

    # Message operations
    @abstractmethod
    async def get_messages_between_users(self, user_id1: int, user_id2: int) -> List[schemas.Message]: ...

    @abstractmethod
    async def get_messages_by_user_id(self, user_id: int) -> List[schemas.Message]: ...

    @abstractmethod
    async def get_unread_message_count(self, user_id: int) -> int: ...

    @abstractmethod
    async def create_message(self, data: Dict[str, Any]) -> schemas.Message: ...

    @abstractmethod
    async def mark_message_as_read(self, message_id: int) -> Optional[schemas.Message]: ...

    # Session operations
    @abstractmethod
    async def create_session(self, sid: str, data: Dict[str, Any], expires_at: datetime) -> None: ...

    @abstractmethod
    async def get_session(self, sid: str) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    async def update_session(self, sid: str, data: Dict[str, Any], expires_at: Optional[datetime] = None) -> bool: ...

    @abstractmethod
    async def delete_session(self, sid: str) -> bool: ...

    async def close(self) -> None:
        """Release backend resources."""
