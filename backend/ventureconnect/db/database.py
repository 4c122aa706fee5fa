"""
Database Storage Module

SQLAlchemy implementation of the Storage interface. Every operation opens its
own AsyncSession from the factory; write paths roll back and log on failure
before re-raising.

Key Features:
- Async database operations
- Error handling and logging
- Transaction management
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Type

from sqlalchemy import String, and_, cast, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from . import models, schemas
from .storage import Storage
from ..utils.logger import db_logger as logger


def like_pattern(query: str) -> str:
    """Substring pattern for ILIKE with the wildcards in ``query`` taken literally."""
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class DatabaseStorage(Storage):
    """Storage backed by a relational database through async SQLAlchemy."""

    def __init__(self, session_factory: async_sessionmaker, engine: Optional[AsyncEngine] = None):
        self.session_factory = session_factory
        self.engine = engine

    # Generic helpers
    async def _get(self, model, schema: Type, record_id: Any):
        async with self.session_factory() as db:
            row = await db.get(model, record_id)
            return schema.model_validate(row) if row is not None else None

    async def _list(self, query, schema: Type) -> list:
        async with self.session_factory() as db:
            result = await db.execute(query)
            return [schema.model_validate(row) for row in result.scalars().all()]

    async def _first(self, query, schema: Type):
        async with self.session_factory() as db:
            result = await db.execute(query)
            row = result.scalars().first()
            return schema.model_validate(row) if row is not None else None

    async def _create(self, model, schema: Type, data: Dict[str, Any]):
        async with self.session_factory() as db:
            try:
                row = model(**data)
                db.add(row)
                await db.commit()
                await db.refresh(row)
                return schema.model_validate(row)
            except Exception as e:
                await db.rollback()
                logger.error(f"Error creating {model.__tablename__} record: {str(e)}")
                raise

    async def _update(self, model, schema: Type, record_id: int, data: Dict[str, Any]):
        values = {k: v for k, v in data.items() if k != "id"}
        async with self.session_factory() as db:
            try:
                if values:
                    await db.execute(update(model).where(model.id == record_id).values(**values))
                    await db.commit()
                row = await db.get(model, record_id, populate_existing=True)
                return schema.model_validate(row) if row is not None else None
            except Exception as e:
                await db.rollback()
                logger.error(f"Error updating {model.__tablename__} {record_id}: {str(e)}")
                raise

    async def _delete(self, model, record_id: int) -> bool:
        async with self.session_factory() as db:
            try:
                result = await db.execute(delete(model).where(model.id == record_id))
                await db.commit()
                return result.rowcount > 0
            except Exception as e:
                await db.rollback()
                logger.error(f"Error deleting {model.__tablename__} {record_id}: {str(e)}")
                raise

    # User operations
    async def get_user(self, user_id: int) -> Optional[schemas.User]:
        return await self._get(models.User, schemas.User, user_id)

    async def get_user_by_username(self, username: str) -> Optional[schemas.User]:
        query = select(models.User).where(func.lower(models.User.username) == username.lower())
        return await self._first(query, schemas.User)

    async def get_user_by_email(self, email: str) -> Optional[schemas.User]:
        query = select(models.User).where(func.lower(models.User.email) == email.lower())
        return await self._first(query, schemas.User)

    async def get_user_by_oidc_subject(self, subject: str) -> Optional[schemas.User]:
        query = select(models.User).where(models.User.oidc_subject == subject)
        return await self._first(query, schemas.User)

    async def create_user(self, data: Dict[str, Any]) -> schemas.User:
        return await self._create(models.User, schemas.User, data)

    async def update_user(self, user_id: int, data: Dict[str, Any]) -> Optional[schemas.User]:
        return await self._update(models.User, schemas.User, user_id, data)

    async def search_users(self, query: str) -> List[schemas.User]:
        statement = select(models.User).order_by(models.User.id)
        if query:
            pattern = like_pattern(query)
            statement = statement.where(or_(
                models.User.name.ilike(pattern, escape="\\"),
                models.User.username.ilike(pattern, escape="\\"),
                models.User.bio.ilike(pattern, escape="\\"),
                models.User.headline.ilike(pattern, escape="\\"),
                models.User.company.ilike(pattern, escape="\\"),
            ))
        return await self._list(statement, schemas.User)

    # Project operations
    async def get_project(self, project_id: int) -> Optional[schemas.Project]:
        return await self._get(models.Project, schemas.Project, project_id)

    async def get_projects_by_user_id(self, user_id: int) -> List[schemas.Project]:
        query = select(models.Project).where(models.Project.user_id == user_id).order_by(models.Project.id)
        return await self._list(query, schemas.Project)

    async def create_project(self, data: Dict[str, Any]) -> schemas.Project:
        return await self._create(models.Project, schemas.Project, data)

    async def update_project(self, project_id: int, data: Dict[str, Any]) -> Optional[schemas.Project]:
        return await self._update(models.Project, schemas.Project, project_id, data)

    async def delete_project(self, project_id: int) -> bool:
        return await self._delete(models.Project, project_id)

    async def search_projects(self, query: str) -> List[schemas.Project]:
        statement = select(models.Project).order_by(models.Project.id)
        if query:
            pattern = like_pattern(query)
            statement = statement.where(or_(
                models.Project.title.ilike(pattern, escape="\\"),
                models.Project.description.ilike(pattern, escape="\\"),
                models.Project.looking_for.ilike(pattern, escape="\\"),
                # Tags are JSON; matching their text form finds substrings of any tag
                cast(models.Project.tags, String).ilike(pattern, escape="\\"),
            ))
        return await self._list(statement, schemas.Project)

    # Resource operations
    async def get_resources_by_user_id(self, user_id: int) -> List[schemas.Resource]:
        query = select(models.Resource).where(models.Resource.user_id == user_id).order_by(models.Resource.id)
        return await self._list(query, schemas.Resource)

    async def create_resource(self, data: Dict[str, Any]) -> schemas.Resource:
        return await self._create(models.Resource, schemas.Resource, data)

    async def update_resource(self, resource_id: int, data: Dict[str, Any]) -> Optional[schemas.Resource]:
        return await self._update(models.Resource, schemas.Resource, resource_id, data)

    # Skill operations
    async def get_skills_by_user_id(self, user_id: int) -> List[schemas.Skill]:
        query = select(models.Skill).where(models.Skill.user_id == user_id).order_by(models.Skill.id)
        return await self._list(query, schemas.Skill)

    async def create_skill(self, data: Dict[str, Any]) -> schemas.Skill:
        return await self._create(models.Skill, schemas.Skill, data)

    async def update_skill(self, skill_id: int, data: Dict[str, Any]) -> Optional[schemas.Skill]:
        return await self._update(models.Skill, schemas.Skill, skill_id, data)

    async def delete_skill(self, skill_id: int) -> bool:
        return await self._delete(models.Skill, skill_id)

    # Post operations
    async def get_post(self, post_id: int) -> Optional[schemas.Post]:
        return await self._get(models.Post, schemas.Post, post_id)

    async def get_feed_posts(self) -> List[Tuple[schemas.Post, schemas.User]]:
        # Inner join drops posts whose author is gone
        query = (
            select(models.Post, models.User)
            .join(models.User, models.User.id == models.Post.user_id)
            .order_by(models.Post.created_at.desc(), models.Post.id.desc())
        )
        async with self.session_factory() as db:
            result = await db.execute(query)
            return [
                (schemas.Post.model_validate(post), schemas.User.model_validate(user))
                for post, user in result.all()
            ]

    async def get_posts_by_user_id(self, user_id: int) -> List[schemas.Post]:
        query = (
            select(models.Post)
            .where(models.Post.user_id == user_id)
            .order_by(models.Post.created_at.desc(), models.Post.id.desc())
        )
        return await self._list(query, schemas.Post)

    async def create_post(self, data: Dict[str, Any]) -> schemas.Post:
        return await self._create(models.Post, schemas.Post, data)

    async def delete_post(self, post_id: int) -> bool:
        return await self._delete(models.Post, post_id)

    # Connection operations
    async def get_connection(self, connection_id: int) -> Optional[schemas.Connection]:
        return await self._get(models.Connection, schemas.Connection, connection_id)

    async def get_connections(self, user_id: int) -> List[schemas.Connection]:
        query = select(models.Connection).where(and_(
            or_(models.Connection.requester_id == user_id, models.Connection.recipient_id == user_id),
            models.Connection.status == "accepted",
        )).order_by(models.Connection.id)
        return await self._list(query, schemas.Connection)

    async def get_pending_connections(self, user_id: int) -> List[schemas.Connection]:
        query = select(models.Connection).where(and_(
            models.Connection.recipient_id == user_id,
            models.Connection.status == "pending",
        )).order_by(models.Connection.id)
        return await self._list(query, schemas.Connection)

    async def get_outgoing_pending_connections(self, user_id: int) -> List[schemas.Connection]:
        query = select(models.Connection).where(and_(
            models.Connection.requester_id == user_id,
            models.Connection.status == "pending",
        )).order_by(models.Connection.id)
        return await self._list(query, schemas.Connection)

    async def create_connection(self, data: Dict[str, Any]) -> schemas.Connection:
        return await self._create(models.Connection, schemas.Connection, data)

    async def update_connection_status(self, connection_id: int, status: str) -> Optional[schemas.Connection]:
        return await self._update(models.Connection, schemas.Connection, connection_id, {"status": status})

    async def get_connection_count(self, user_id: int) -> int:
        query = select(func.count(models.Connection.id)).where(and_(
            or_(models.Connection.requester_id == user_id, models.Connection.recipient_id == user_id),
            models.Connection.status == "accepted",
        ))
        async with self.session_factory() as db:
            return (await db.execute(query)).scalar_one()

    # Message operations
    async def get_messages_between_users(self, user_id1: int, user_id2: int) -> List[schemas.Message]:
        query = select(models.Message).where(or_(
            and_(models.Message.sender_id == user_id1, models.Message.recipient_id == user_id2),
            and_(models.Message.sender_id == user_id2, models.Message.recipient_id == user_id1),
        )).order_by(models.Message.created_at, models.Message.id)
        return await self._list(query, schemas.Message)

    async def get_messages_by_user_id(self, user_id: int) -> List[schemas.Message]:
        query = select(models.Message).where(or_(
            models.Message.sender_id == user_id,
            models.Message.recipient_id == user_id,
        )).order_by(models.Message.created_at.desc(), models.Message.id.desc())
        return await self._list(query, schemas.Message)

    async def get_unread_message_count(self, user_id: int) -> int:
        query = select(func.count(models.Message.id)).where(and_(
            models.Message.recipient_id == user_id,
            models.Message.is_read.is_(False),
        ))
        async with self.session_factory() as db:
            return (await db.execute(query)).scalar_one()

    async def create_message(self, data: Dict[str, Any]) -> schemas.Message:
        return await self._create(models.Message, schemas.Message, data)

    async def mark_message_as_read(self, message_id: int) -> Optional[schemas.Message]:
        return await self._update(models.Message, schemas.Message, message_id, {"is_read": True})

    # Session operations
    async def create_session(self, sid: str, data: Dict[str, Any], expires_at: datetime) -> None:
        async with self.session_factory() as db:
            try:
                db.add(models.Session(sid=sid, data=data, expires_at=expires_at))
                await db.commit()
            except Exception as e:
                await db.rollback()
                logger.error(f"Error creating session: {str(e)}")
                raise

    async def get_session(self, sid: str) -> Optional[Dict[str, Any]]:
        async with self.session_factory() as db:
            row = await db.get(models.Session, sid)
            if row is None:
                return None
            if row.expires_at <= datetime.utcnow():
                await db.delete(row)
                await db.commit()
                return None
            return dict(row.data)

    async def update_session(self, sid: str, data: Dict[str, Any], expires_at: Optional[datetime] = None) -> bool:
        values: Dict[str, Any] = {"data": data}
        if expires_at is not None:
            values["expires_at"] = expires_at
        async with self.session_factory() as db:
            try:
                result = await db.execute(
                    update(models.Session).where(models.Session.sid == sid).values(**values)
                )
                await db.commit()
                return result.rowcount > 0
            except Exception as e:
                await db.rollback()
                logger.error(f"Error updating session: {str(e)}")
                raise

    async def delete_session(self, sid: str) -> bool:
        async with self.session_factory() as db:
            result = await db.execute(delete(models.Session).where(models.Session.sid == sid))
            await db.commit()
            return result.rowcount > 0

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
