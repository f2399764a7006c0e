"""
Shared fixtures: an in-memory stand-in for the asyncpg pool.

The fake connection understands the three statements the Postgres adapter
issues and honours the two store guarantees the upsert depends on: the
conditional UPDATE is atomic, and `id` is unique.
"""

import asyncio
import contextlib
from collections.abc import Callable
from typing import Any

import asyncpg
import pytest

from userstore.adapters.postgres_adapter import PostgresUserAdapter

SCHEMA = "user_service"


class FakeConnection:
    def __init__(self, table: dict[str, dict[str, Any]]) -> None:
        self.table = table
        self.statements: list[str] = []
        self.before_insert: Callable[[], None] | None = None

    async def fetchrow(self, query: str, user_id: str) -> dict[str, Any] | None:
        await asyncio.sleep(0)
        self.statements.append("select")
        row = self.table.get(user_id)
        return dict(row) if row is not None else None

    async def execute(self, query: str, *args: Any) -> str:
        # yield so concurrent callers interleave; each statement then applies atomically
        await asyncio.sleep(0)
        if query.startswith("update"):
            self.statements.append("update")
            user_id, new_version, employee_id, role, expected_version = args
            row = self.table.get(user_id)
            if row is None or row["version"] != expected_version:
                return "UPDATE 0"
            row.update(version=new_version, employee_id=employee_id, job_profile=role)
            return "UPDATE 1"

        if query.startswith("insert"):
            self.statements.append("insert")
            if self.before_insert is not None:
                self.before_insert()
            user_id, version, employee_id, role = args
            if user_id in self.table:
                raise asyncpg.UniqueViolationError(
                    'duplicate key value violates unique constraint "user_pkey"'
                )
            self.table[user_id] = {
                "id": user_id,
                "version": version,
                "employee_id": employee_id,
                "job_profile": role,
            }
            return "INSERT 0 1"

        raise AssertionError(f"unexpected statement: {query}")


class FakePool:
    def __init__(self) -> None:
        self.table: dict[str, dict[str, Any]] = {}
        self.conn = FakeConnection(self.table)

    @contextlib.asynccontextmanager
    async def acquire(self):
        yield self.conn


@pytest.fixture
def pool() -> FakePool:
    return FakePool()


@pytest.fixture
def adapter(pool: FakePool) -> PostgresUserAdapter:
    return PostgresUserAdapter(pool=pool, schema=SCHEMA)
