"""
Storage package: models, schemas, the Storage interface and its backends.
"""

__all__ = [
    "models",           # SQLAlchemy tables
    "schemas",          # Pydantic schemas
    "storage",          # Abstract Storage interface
    "memory",           # In-memory backend
    "database",         # SQLAlchemy backend
    "seed",             # Sample network
    "session",          # Engine, session factory and storage dependency
    "rebuild_tables",   # Table management script
]
