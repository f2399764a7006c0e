"""
Concrete implementation of UserPort using raw SQL over an asyncpg pool.
"""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Mapping
from typing import Any

import asyncpg

from userstore.adapters.optimistic_adapter import OptimisticUserAdapter
from userstore.db import user_table
from userstore.domain.errors import DuplicateUserError, StorageFault
from userstore.domain.models import User

logger = logging.getLogger(__name__)

_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class PostgresUserAdapter(OptimisticUserAdapter):
    """All user I/O goes through a pooled asyncpg connection."""

    def __init__(self, pool: asyncpg.Pool, schema: str) -> None:
        self._pool = pool
        table = user_table(schema)
        self.select_sql = f"select * from {table} where id = $1"
        self.update_sql = (
            f"update {table} "
            f"set version = $2, employee_id = $3, job_profile = $4 "
            f"where id = $1 and version = $5"
        )
        self.insert_sql = (
            f"insert into {table} (id, version, employee_id, job_profile) "
            f"values ($1, $2, $3, $4)"
        )

    @contextlib.asynccontextmanager
    async def _connection(self) -> AsyncIterator[asyncpg.Connection]:
        try:
            async with self._pool.acquire() as conn:
                yield conn
        except _DRIVER_ERRORS as exc:
            raise StorageFault(f"Postgres request failed: {exc}", exc) from exc

    async def _fetch_row(self, user_id: str) -> Mapping[str, Any] | None:
        async with self._connection() as conn:
            return await conn.fetchrow(self.select_sql, user_id)

    async def _update_if_version(self, user: User) -> int:
        async with self._connection() as conn:
            status = await conn.execute(
                self.update_sql,
                user.id,
                user.version + 1,
                user.employee_id,
                user.role,
                user.version,
            )
        return _rows_affected(status)

    async def _insert(self, user: User) -> None:
        async with self._connection() as conn:
            try:
                await conn.execute(
                    self.insert_sql,
                    user.id,
                    user.version,
                    user.employee_id,
                    user.role,
                )
            except asyncpg.UniqueViolationError as exc:
                logger.warning("insert of user '%s' lost a create race", user.id)
                raise DuplicateUserError(user.id, exc) from exc


def _rows_affected(status: str) -> int:
    """Parse the row count out of a command tag such as 'UPDATE 1'."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError) as exc:
        raise StorageFault(f"Unexpected command status from Postgres: {status!r}", exc) from exc
