"""
Async PostgreSQL connection pool for the Renew Admin backend.

The pool is a module-level singleton created at application startup and
shared by the stores, the brand service and the auth service.

Key Components:
- init_db(): Create the pool from settings (idempotent)
- get_db_pool(): Return the pool, initializing lazily if needed
- close_db(): Close the pool at shutdown
- ensure_schema(): Create tables and indexes if they do not exist
- rows_affected(): Row count from an asyncpg command status

Connection Pool Configuration (from Settings):
- db_pool_min_size (default 2)
- db_pool_max_size (default 10)
- db_command_timeout (default 60 seconds)

Usage:
    # In the FastAPI lifespan
    await init_db()
    await ensure_schema()
    ...
    await close_db()

    # In a store
    pool = await get_db_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch("SELECT * FROM data_entry WHERE b1 = $1", b1)
"""

import logging
from typing import Optional

import asyncpg
from asyncpg import Pool

from renew_admin.core.config import get_settings
from renew_admin.sql.schema import get_schema_statements


logger = logging.getLogger(__name__)


# =============================================================================
# Global Pool Singleton
# =============================================================================

# None until init_db() is called
_pool: Optional[Pool] = None


# =============================================================================
# Pool Lifecycle Functions
# =============================================================================

async def init_db() -> Pool:
    """
    Initialize the database connection pool.

    Calling this when the pool already exists returns the existing pool.

    Returns:
        Pool: The asyncpg connection pool instance.

    Raises:
        asyncpg.PostgresError: If connection to the database fails.
        OSError: If the database host is unreachable.
    """
    global _pool

    if _pool is None:
        settings = get_settings()
        _pool = await asyncpg.create_pool(
            dsn=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
        )
        logger.info(
            f"Database pool created (min={settings.db_pool_min_size}, "
            f"max={settings.db_pool_max_size})"
        )

    return _pool


async def get_db_pool() -> Pool:
    """
    Get the database connection pool, initializing if needed.

    Prefer calling init_db() at startup; lazy initialization adds latency to
    the first request.
    """
    global _pool

    if _pool is None:
        await init_db()

    assert _pool is not None, "Pool should be initialized after init_db()"

    return _pool


async def close_db() -> None:
    """
    Close the database connection pool gracefully.

    Idempotent. After closing, get_db_pool() creates a new pool.
    """
    global _pool

    if _pool is not None:
        await _pool.close()
        _pool = None


async def ensure_schema() -> None:
    """
    Create the application tables and indexes if they do not exist.

    All statements run in one transaction so a failed startup leaves no
    half-created schema.
    """
    pool = await get_db_pool()

    async with pool.acquire() as conn:
        async with conn.transaction():
            for statement in get_schema_statements():
                await conn.execute(statement)

    logger.info("Database schema verified")


def rows_affected(status: str) -> int:
    """Parse the trailing row count of an asyncpg command status string."""
    try:
        return int(status.split()[-1])
    except (AttributeError, IndexError, ValueError):
        return 0
