#!/usr/bin/env python
"""
Script to manage database tables.

Usage:
    python -m ventureconnect.db.rebuild_tables            # create missing tables
    python -m ventureconnect.db.rebuild_tables --rebuild  # drop and recreate
"""

import asyncio
import sys
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.schema import DropTable
from sqlalchemy.ext.compiler import compiles
from ..utils.logger import db_logger as logger
from . import models
from .session import engine


# Custom PostgreSQL CASCADE drop
@compiles(DropTable, "postgresql")
def _compile_drop_table(element, compiler, **kwargs):
    return compiler.visit_drop_table(element) + " CASCADE"


async def existing_tables(bind: AsyncEngine = engine) -> list:
    async with bind.connect() as conn:
        return await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())


async def rebuild_tables(bind: AsyncEngine = engine) -> None:
    """Drop and recreate all tables."""
    try:
        async with bind.begin() as conn:
            await conn.run_sync(models.Base.metadata.drop_all)
            logger.info("Dropped all existing tables")
            await conn.run_sync(models.Base.metadata.create_all)
            logger.info("Created tables with updated schema")
    except Exception as e:
        logger.error(f"Error rebuilding tables: {str(e)}")
        raise


async def create_fresh_tables(bind: AsyncEngine = engine) -> bool:
    """Create tables only if none exist yet."""
    try:
        if await existing_tables(bind):
            logger.warning("Tables already exist. Use --rebuild to recreate them.")
            return False

        async with bind.begin() as conn:
            await conn.run_sync(models.Base.metadata.create_all)
        logger.info("Created fresh tables")
        return True
    except Exception as e:
        logger.error(f"Error creating fresh tables: {str(e)}")
        raise


async def main(argv) -> None:
    try:
        if "--rebuild" in argv:
            await rebuild_tables()
        else:
            await create_fresh_tables()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1:]))
