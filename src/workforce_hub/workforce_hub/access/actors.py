"""Build evaluator inputs from stored users and records."""

from __future__ import annotations

from typing import Any, Optional

from ..core.enums import Role
from ..users.model import User
from .model import Actor, RecordContext
from .ranking import at_least


def actor_from_user(user: User) -> Actor:
    return Actor(
        role=user.role,
        user_id=user.user_id,
        department_id=user.dept_id,
        is_active=user.is_active,
    )


def record_for_user(user: User) -> RecordContext:
    """Context for managing a user account (the user owns their own account)."""
    return RecordContext(owner_id=user.user_id, department_id=user.dept_id, owner_role=user.role)


def record_owned_by(owner: Optional[User], *, department_id: Any = None) -> RecordContext:
    """Context for a record (leave, expense, task...) owned by `owner`.

    `department_id` overrides the owner's department, e.g. a project's
    department for tasks.
    """
    if owner is None:
        return RecordContext(department_id=department_id)
    return RecordContext(
        owner_id=owner.user_id,
        department_id=department_id if department_id is not None else owner.dept_id,
        owner_role=owner.role,
    )


def is_org_wide(actor: Actor) -> bool:
    """ORG_ADMIN and above see every department."""
    return at_least(actor.role, Role.ORG_ADMIN)
