"""
Database Session Management Module

This module handles database connection and session management using SQLAlchemy.
Provides the async engine, session factory, table initialisation helpers and
the storage dependency used by the routes.

Key Features:
- Async SQLAlchemy engine
- Connection pooling (server databases only)
- Storage backend selection
"""

from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine, AsyncSession
from .storage import Storage
from .memory import MemStorage
from .database import DatabaseStorage
from ..utils.config import settings
from ..utils.logger import db_logger as logger


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    SQLite URLs get no pool sizing since its dialect picks its own pool.
    """
    options = {
        "echo": echo,
        "pool_pre_ping": True,  # Basic connection health check
    }
    if not make_url(database_url).get_backend_name().startswith("sqlite"):
        options.update(pool_size=5, max_overflow=10, pool_recycle=3600)
    return create_async_engine(database_url, **options)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind, expire_on_commit=False, class_=AsyncSession)


# Create async engine for SQLAlchemy
engine = build_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)

# Create session factory
async_session = build_session_factory(engine)


_storage: Optional[Storage] = None


def create_storage(backend: Optional[str] = None) -> Storage:
    """
    Build the storage backend named by STORAGE_BACKEND.

    Raises:
        ValueError: for an unknown backend name
    """
    backend = (backend or settings.STORAGE_BACKEND).lower()
    if backend == "memory":
        logger.info("Using in-memory storage")
        return MemStorage(seed_data=settings.SEED_SAMPLE_DATA)
    if backend == "database":
        logger.info("Using database storage")
        return DatabaseStorage(async_session, engine)
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend}")


def get_storage() -> Storage:
    """
    FastAPI dependency for the application storage.

    The backend is created on first use and shared afterwards.
    """
    global _storage
    if _storage is None:
        _storage = create_storage()
    return _storage


async def init_db(bind: AsyncEngine = engine) -> None:
    """Create all tables that do not exist yet."""
    from .models import Base

    logger.info("Creating database tables")
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


async def check_db_connection(factory: async_sessionmaker = async_session) -> bool:
    """Check if database connection is healthy"""
    try:
        async with factory() as db:
            await db.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection error: {str(e)}")
        return False
