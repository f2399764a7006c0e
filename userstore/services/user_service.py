"""
User service — profile retrieval and optimistic profile edits.
Depends on the port only (Dependency Inversion).
"""

import logging

from userstore.domain.models import User
from userstore.ports.user_port import UserPort

logger = logging.getLogger(__name__)


class UserService:
    """Orchestrates user-related business logic."""

    def __init__(self, users: UserPort) -> None:
        self._users = users

    async def get_profile(self, user_id: str) -> User | None:
        """Fetch a user from the store, None if unknown."""
        return await self._users.get_by_id(user_id)

    async def create_user(self, user_id: str, employee_id: int | None) -> User:
        """Persist a brand-new user at version 0 with no role."""
        return await self._users.update_or_create(User.new(user_id, employee_id))

    async def assign_role(self, user: User, role: str | None) -> User:
        """
        Change the role of `user`, as last read by the caller.

        Raises VersionConflict if someone else wrote the user since then;
        the caller should re-read and decide whether to retry.
        """
        updated = await self._users.update_or_create(user.with_role(role))
        logger.info("role of user '%s' is now %r (version %d)", updated.id, updated.role, updated.version)
        return updated

    async def link_employee(self, user: User, employee_id: int | None) -> User:
        """Change the employee linkage of `user`, as last read by the caller."""
        return await self._users.update_or_create(user.with_employee_id(employee_id))
