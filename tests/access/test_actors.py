from src.workforce_hub.workforce_hub.access.actors import (
    actor_from_user,
    is_org_wide,
    record_for_user,
    record_owned_by,
)
from src.workforce_hub.workforce_hub.core.enums import Role
from src.workforce_hub.workforce_hub.users.model import User


def _user(user_id=7, role=Role.EMPLOYEE, dept_id=3, active=True):
    return User(
        user_id=user_id,
        email=f"u{user_id}@corp.local",
        full_name=f"User {user_id}",
        password_hash="x",
        role=role,
        dept_id=dept_id,
        is_active=active,
    )


def test_actor_from_user_copies_identity():
    actor = actor_from_user(_user(active=False))
    assert actor.user_id == 7
    assert actor.role is Role.EMPLOYEE
    assert actor.department_id == 3
    assert actor.is_active is False


def test_record_for_user_is_owned_by_the_user():
    record = record_for_user(_user(role=Role.HR, dept_id=2))
    assert record.owner_id == 7
    assert record.department_id == 2
    assert record.owner_role is Role.HR


def test_record_owned_by_department_override():
    record = record_owned_by(_user(dept_id=3), department_id=9)
    assert record.department_id == 9
    assert record.owner_id == 7


def test_record_owned_by_missing_owner():
    record = record_owned_by(None, department_id=5)
    assert record.owner_id is None
    assert record.department_id == 5


def test_is_org_wide():
    assert is_org_wide(actor_from_user(_user(role=Role.ORG_ADMIN)))
    assert not is_org_wide(actor_from_user(_user(role=Role.DEPT_ADMIN)))
