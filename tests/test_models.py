import pytest
from pydantic import ValidationError

from userstore.domain.errors import DuplicateUserError, StorageFault, VersionConflict
from userstore.domain.models import User


def test_new_user_starts_at_version_zero_without_role():
    user = User.new("user-1", 12345)

    assert user.id == "user-1"
    assert user.version == 0
    assert user.employee_id == 12345
    assert user.role is None


def test_user_is_immutable():
    user = User.new("user-1", 12345)

    with pytest.raises(ValidationError):
        user.role = "admin"


def test_with_role_keeps_id_and_version():
    user = User(id="user-1", version=3, employee_id=7)

    changed = user.with_role("new-role")

    assert changed == User(id="user-1", version=3, employee_id=7, role="new-role")
    assert user.role is None


def test_with_employee_id_can_clear_linkage():
    user = User(id="user-1", version=1, employee_id=7, role="r")

    assert user.with_employee_id(None).employee_id is None


@pytest.mark.parametrize("kwargs", [{"id": ""}, {"id": "user-1", "version": -1}])
def test_invalid_users_are_rejected(kwargs):
    with pytest.raises(ValidationError):
        User(**kwargs)


def test_version_conflict_message_names_all_three_facts():
    conflict = VersionConflict("user-1", 0, 1)

    assert str(conflict) == (
        "The version of user 'user-1' provided for update is '0'. "
        "But the latest version of user 'user-1' is '1'. "
        "Please update on top of this version."
    )
    assert (conflict.user_id, conflict.submitted_version, conflict.current_version) == ("user-1", 0, 1)


def test_duplicate_user_is_a_storage_fault():
    cause = RuntimeError("23505")
    error = DuplicateUserError("user-1", cause)

    assert isinstance(error, StorageFault)
    assert error.original is cause
    assert "user-1" in str(error)
