"""
Pydantic models for the user store.
Pure data — no I/O, no side effects.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


# ── User ──────────────────────────────────────────────────────


class User(BaseModel):
    """
    A user profile as persisted in the store.

    `version` is the optimistic-lock token: it is 0 after the first insert
    and grows by exactly one on every successful update. A caller sends back
    the version it last read; the store advances it.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    version: int = Field(0, ge=0)
    employee_id: int | None = None
    role: str | None = None

    @classmethod
    def new(cls, user_id: str, employee_id: int | None) -> User:
        """A fresh user: version 0, linked to `employee_id`, no role yet."""
        return cls(id=user_id, version=0, employee_id=employee_id, role=None)

    def with_role(self, role: str | None) -> User:
        return self.model_copy(update={"role": role})

    def with_employee_id(self, employee_id: int | None) -> User:
        return self.model_copy(update={"employee_id": employee_id})
