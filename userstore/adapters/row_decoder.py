"""
Turns a raw `user` row into a `User`.

Works on anything with a mapping-style `.get()`: asyncpg Records and the
plain dicts returned by PostgREST. Columns may come back as text or as
integers depending on the schema, so numbers are parsed either way.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from userstore.domain.errors import DecodeFault
from userstore.domain.models import User


def decode_user(row: Mapping[str, Any]) -> User:
    user_id = _id(row)
    try:
        return User(
            id=user_id,
            version=_version(row, user_id),
            employee_id=_employee_id(row, user_id),
            role=_role(row, user_id),
        )
    except ValidationError as exc:
        loc = exc.errors()[0]["loc"]
        field = str(loc[0]) if loc else "user"
        raise DecodeFault(
            f"User '{user_id}' in DB is malformed: {exc.errors()[0]['msg']}",
            field=field,
            user_id=user_id,
        ) from exc


def _id(row: Mapping[str, Any]) -> str:
    user_id = row.get("id")
    if user_id is None:
        raise DecodeFault("id is missing for User in DB", field="id")
    user_id = str(user_id)
    if not user_id.strip():
        raise DecodeFault("id is empty for User in DB", field="id")
    return user_id


def _version(row: Mapping[str, Any], user_id: str) -> int:
    raw = row.get("version")
    if raw is None:
        raise DecodeFault(
            f"version is missing for User '{user_id}' in DB",
            field="version",
            user_id=user_id,
        )
    version = _parse_int(raw)
    if version is None or version < 0:
        raise DecodeFault(
            f"version of User '{user_id}' in DB is not a valid version: '{raw}'",
            field="version",
            user_id=user_id,
        )
    return version


def _employee_id(row: Mapping[str, Any], user_id: str) -> int | None:
    raw = row.get("employee_id")
    if raw is None:
        return None
    employee_id = _parse_int(raw)
    if employee_id is None:
        raise DecodeFault(
            f"employee_id of User '{user_id}' in DB is not an integer: '{raw}'",
            field="employee_id",
            user_id=user_id,
        )
    return employee_id


def _role(row: Mapping[str, Any], user_id: str) -> str | None:
    # stored as job_profile
    role = row.get("job_profile")
    if role is not None and not isinstance(role, str):
        raise DecodeFault(
            f"job_profile of User '{user_id}' in DB is not text: '{role}'",
            field="job_profile",
            user_id=user_id,
        )
    return role


def _parse_int(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError:
        return None
