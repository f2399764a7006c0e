"""
Error taxonomy for the user store.

A missing row is never an error here: lookups return None.
"""


class UserStoreError(Exception):
    """Base class for everything the user store raises on purpose."""


class DecodeFault(UserStoreError):
    """A stored row exists but a mandatory field is missing or unparsable."""

    def __init__(self, message: str, field: str, user_id: str | None = None) -> None:
        self.field = field
        self.user_id = user_id
        super().__init__(message)


class VersionConflict(UserStoreError):
    """
    The caller's version no longer matches the stored one.

    Recoverable: re-read the user and retry on top of `current_version`.
    """

    def __init__(self, user_id: str, submitted_version: int, current_version: int) -> None:
        self.user_id = user_id
        self.submitted_version = submitted_version
        self.current_version = current_version
        super().__init__(
            f"The version of user '{user_id}' provided for update is '{submitted_version}'. "
            f"But the latest version of user '{user_id}' is '{current_version}'. "
            f"Please update on top of this version."
        )


class StorageFault(UserStoreError):
    """Connectivity, transport or constraint failure reported by the store."""

    def __init__(self, message: str, original: BaseException | None = None) -> None:
        self.original = original
        super().__init__(message)


class DuplicateUserError(StorageFault):
    """An INSERT hit the uniqueness constraint on the user id."""

    def __init__(self, user_id: str, original: BaseException | None = None) -> None:
        self.user_id = user_id
        super().__init__(f"User '{user_id}' already exists in DB", original)
