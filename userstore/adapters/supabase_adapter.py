"""
Concrete implementation of UserPort using the async Supabase Python client.

PostgREST issues the same three statements as the Postgres adapter; an
UPDATE filtered on id and version returns the rows it changed, so their
count is the affected-row count.
"""

import logging
from collections.abc import Mapping
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient

from userstore.adapters.optimistic_adapter import OptimisticUserAdapter
from userstore.domain.errors import DuplicateUserError, StorageFault
from userstore.domain.models import User

logger = logging.getLogger(__name__)

USER_TABLE = "user"
_UNIQUE_VIOLATION = "23505"
# older postgrest releases raise this from maybe_single() when no row matched
_NO_ROWS = "204"


class SupabaseUserAdapter(OptimisticUserAdapter):
    """All user I/O goes through the Supabase REST client."""

    def __init__(self, client: AsyncClient, schema: str) -> None:
        self._client = client
        self._schema = schema

    def _table(self):
        return self._client.schema(self._schema).from_(USER_TABLE)

    async def _fetch_row(self, user_id: str) -> Mapping[str, Any] | None:
        try:
            result = await (
                self._table()
                .select("*")
                .eq("id", user_id)
                .maybe_single()
                .execute()
            )
        except APIError as exc:
            if str(exc.code) == _NO_ROWS:
                return None
            raise StorageFault(f"Supabase select failed: {exc}", exc) from exc
        except httpx.HTTPError as exc:
            raise StorageFault(f"Supabase select failed: {exc}", exc) from exc
        return result.data if result else None

    async def _update_if_version(self, user: User) -> int:
        try:
            result = await (
                self._table()
                .update(
                    {
                        "version": user.version + 1,
                        "employee_id": user.employee_id,
                        "job_profile": user.role,
                    }
                )
                .eq("id", user.id)
                .eq("version", user.version)
                .execute()
            )
        except (APIError, httpx.HTTPError) as exc:
            raise StorageFault(f"Supabase update failed: {exc}", exc) from exc
        return len(result.data or [])

    async def _insert(self, user: User) -> None:
        try:
            await (
                self._table()
                .insert(
                    {
                        "id": user.id,
                        "version": user.version,
                        "employee_id": user.employee_id,
                        "job_profile": user.role,
                    }
                )
                .execute()
            )
        except APIError as exc:
            if exc.code == _UNIQUE_VIOLATION:
                logger.warning("insert of user '%s' lost a create race", user.id)
                raise DuplicateUserError(user.id, exc) from exc
            raise StorageFault(f"Supabase insert failed: {exc}", exc) from exc
        except httpx.HTTPError as exc:
            raise StorageFault(f"Supabase insert failed: {exc}", exc) from exc
