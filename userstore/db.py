"""
asyncpg connection pool and schema helpers for the Postgres backend.
"""

import asyncio
import logging

import asyncpg

from userstore.config import settings
from userstore.domain.errors import StorageFault

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None
_pool_lock = asyncio.Lock()


async def init_pool() -> asyncpg.Pool:
    """Initialize the connection pool on startup."""
    global _pool
    # Concurrent first callers must share one pool.
    async with _pool_lock:
        if _pool is None:
            try:
                _pool = await asyncpg.create_pool(
                    settings.database_url,
                    min_size=settings.db_pool_min_size,
                    max_size=settings.db_pool_max_size,
                    command_timeout=settings.db_command_timeout,
                    max_inactive_connection_lifetime=300,
                    server_settings={"application_name": settings.app_name},
                )
            except (asyncpg.PostgresError, OSError, asyncio.TimeoutError) as exc:
                raise StorageFault(f"Could not connect to Postgres: {exc}", exc) from exc
            logger.info(
                "Postgres pool created (min=%d, max=%d)",
                settings.db_pool_min_size,
                settings.db_pool_max_size,
            )
    return _pool


async def get_pool() -> asyncpg.Pool:
    """Get or create the connection pool."""
    if _pool is None:
        return await init_pool()
    return _pool


async def close_pool() -> None:
    """Close the connection pool gracefully."""
    global _pool
    async with _pool_lock:
        if _pool is not None:
            await _pool.close()
            _pool = None
            logger.info("Postgres pool closed")


def user_table(schema: str) -> str:
    return f'"{schema}"."user"'


async def ensure_schema(pool: asyncpg.Pool, schema: str) -> None:
    """Create the schema and `user` table if missing (non-destructive)."""
    async with pool.acquire() as conn:
        await conn.execute(f'CREATE SCHEMA IF NOT EXISTS "{schema}"')
        await conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {user_table(schema)} (
                id          TEXT PRIMARY KEY,
                version     INTEGER NOT NULL,
                employee_id INTEGER NULL,
                job_profile TEXT NULL
            )
            """
        )
    logger.info("Schema '%s' ready", schema)


async def reset_users(pool: asyncpg.Pool, schema: str) -> int:
    """Delete every user row. Test/reset tooling only."""
    async with pool.acquire() as conn:
        status = await conn.execute(f"DELETE FROM {user_table(schema)}")
    deleted = int(status.split()[-1])
    logger.info("number of rows deleted in 'user' table: %d", deleted)
    return deleted
