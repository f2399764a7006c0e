from abc import ABC, abstractmethod

from userstore.domain.models import User


class UserPort(ABC):
    @abstractmethod
    async def get_by_id(self, user_id: str) -> User | None:
        """Fetch a single user by ID, or None if no row exists."""
        ...

    @abstractmethod
    async def update_or_create(self, user: User) -> User:
        """
        Update the user on top of `user.version`, or create it if absent.

        Returns the user as stored after the write.

        Raises:
            VersionConflict: the user exists with a different version.
            StorageFault: the store rejected the write or is unreachable.
            DecodeFault: the row read back is malformed.
        """
        ...
