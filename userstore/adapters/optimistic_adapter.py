"""
Optimistic-concurrency upsert shared by every store adapter.

Concrete adapters only supply three primitives (fetch a row, conditional
update, insert). The state machine lives here:

    UPDATE ... WHERE id = :id AND version = :version
      ├─ rows > 0  → re-read and return the stored user
      └─ rows == 0 → read by id
           ├─ absent  → INSERT, re-read and return
           └─ present → VersionConflict(id, submitted, current)

The UPDATE is the only atomic step. The absence check followed by the
INSERT is not; two callers creating the same id can both reach the INSERT,
and the store's unique constraint on `id` turns the second into a
DuplicateUserError.
"""

import logging
from abc import abstractmethod
from collections.abc import Mapping
from typing import Any

from userstore.adapters.row_decoder import decode_user
from userstore.domain.errors import StorageFault, VersionConflict
from userstore.domain.models import User
from userstore.ports.user_port import UserPort

logger = logging.getLogger(__name__)


class OptimisticUserAdapter(UserPort):
    """UserPort implemented on top of a compare-and-swap capable store."""

    # ── Store primitives ──────────────────────────────────────

    @abstractmethod
    async def _fetch_row(self, user_id: str) -> Mapping[str, Any] | None:
        """Select all columns of the row with this id, or None."""
        ...

    @abstractmethod
    async def _update_if_version(self, user: User) -> int:
        """
        Advance the row to `user.version + 1` if it is still at `user.version`.

        Overwrites employee_id and job_profile with the user's values (NULL
        when absent). Returns the number of rows affected.
        """
        ...

    @abstractmethod
    async def _insert(self, user: User) -> None:
        """Insert the user as given, version included."""
        ...

    # ── UserPort ──────────────────────────────────────────────

    async def get_by_id(self, user_id: str) -> User | None:
        row = await self._fetch_row(user_id)
        if row is None:
            return None
        return decode_user(row)

    async def update_or_create(self, user: User) -> User:
        rows_updated = await self._update_if_version(user)

        if rows_updated > 0:
            logger.info(
                "user with id '%s' updated successfully on top of version '%s'",
                user.id,
                user.version,
            )
            return await self._read_back(user.id)

        logger.info(
            "user with id '%s' and version '%s' does not exist for update",
            user.id,
            user.version,
        )
        current = await self.get_by_id(user.id)
        if current is not None:
            conflict = VersionConflict(user.id, user.version, current.version)
            logger.warning("%s", conflict)
            raise conflict

        await self._insert(user)
        logger.info("user with id '%s' created with version '%s'", user.id, user.version)
        return await self._read_back(user.id)

    async def _read_back(self, user_id: str) -> User:
        stored = await self.get_by_id(user_id)
        if stored is None:
            # Only reachable if something outside this port deleted the row
            # between our write and the re-read.
            raise StorageFault(f"user '{user_id}' vanished right after being written")
        return stored
