from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..access.actors import record_for_user
from ..access.evaluator import authorize_record
from ..access.guard import NOT_PERMITTED, ensure, ensure_action
from ..access.model import Actor, RecordContext
from ..access.ranking import at_least, is_higher
from ..common.validators import optional_text, require_email, require_min_length, require_non_empty
from ..core.constants import STATS_LIMIT
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .department_model import Department
from .department_repository import DepartmentRepository
from .model import User, UserStats
from .repository import UserRepository

logger = logging.getLogger(__name__)

# Roles that see every account: org-wide admins, plus HR for people operations.
_ORG_WIDE_VIEW = (Role.HR,)
# Roles that see their own department (team view).
_DEPARTMENT_VIEW = (Role.DEPT_ADMIN, Role.PROJECT_MANAGER, Role.TEAM_LEAD)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    full_name: str
    email: str
    role: Role
    dept_id: Optional[int]


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email(email.strip().lower() if isinstance(email, str) else "")
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password if isinstance(password, str) else "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME'
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        logger.info("login user_id=%s role=%s", user.user_id, user.role.value)
        return SessionUser(
            user_id=user.user_id,
            full_name=user.full_name,
            email=user.email,
            role=user.role,
            dept_id=user.dept_id,
        )


class UserService:
    """Use case: manage users (admin) and browse the directory."""

    def __init__(self, users: UserRepository, departments: DepartmentRepository):
        self._users = users
        self._departments = departments

    def _get(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def _ensure_department(self, dept_id: Optional[int]) -> Optional[int]:
        if dept_id is None:
            return None
        if not self._departments.get_by_id(int(dept_id)):
            raise ValidationError("Department does not exist")
        return int(dept_id)

    @staticmethod
    def _ensure_can_grant(actor: Actor, role: Role) -> None:
        # Only SUPER_ADMIN may grant its own rank; everyone else grants strictly lower roles.
        if actor.role is Role.SUPER_ADMIN:
            return
        if not is_higher(actor.role, role):
            raise AuthorizationError(NOT_PERMITTED)

    @staticmethod
    def _ensure_not_self(actor: Actor, user_id: int) -> None:
        if int(user_id) == actor.user_id:
            raise AuthorizationError("You cannot change your own account this way")

    def list_visible(self, actor: Actor, *, limit: int = 200) -> Sequence[User]:
        if at_least(actor.role, Role.ORG_ADMIN) or actor.role in _ORG_WIDE_VIEW:
            return self._users.list_users(limit=limit)
        if actor.role in _DEPARTMENT_VIEW and actor.department_id is not None:
            return self._users.list_users(dept_id=actor.department_id, limit=limit)
        me = self._users.get_by_id(actor.user_id)
        return [me] if me else []

    @staticmethod
    def _can_view(actor: Actor, user: User) -> bool:
        if user.user_id == actor.user_id:
            return True
        if at_least(actor.role, Role.ORG_ADMIN) or actor.role in _ORG_WIDE_VIEW:
            return True
        return actor.role in _DEPARTMENT_VIEW and actor.department_id is not None and user.dept_id == actor.department_id

    def get_user(self, actor: Actor, user_id: int) -> User:
        user = self._get(user_id)
        if not self._can_view(actor, user):
            raise AuthorizationError(NOT_PERMITTED)
        return user

    def create_user(
        self,
        actor: Actor,
        *,
        full_name: str,
        email: str,
        password: str,
        role: Role,
        dept_id: Optional[int],
        position: Optional[str] = None,
        phone: Optional[str] = None,
        employee_code: Optional[str] = None,
    ) -> int:
        ensure_action(actor, "create-user")
        full_name = require_non_empty(full_name, "Full name")
        email = require_email(email)
        require_min_length(password, "Password", 8)
        dept_id = self._ensure_department(dept_id)

        self._ensure_can_grant(actor, role)
        target = RecordContext(department_id=dept_id, owner_role=role)
        ensure(authorize_record(actor, target), actor=actor, action="create-user")

        if self._users.get_by_email(email):
            raise ValidationError("Email is already registered")

        user_id = self._users.create_user(
            email=email,
            full_name=full_name,
            password_hash=generate_password_hash(password),
            role=role,
            dept_id=dept_id,
            position=optional_text(position, "Position"),
            phone=optional_text(phone, "Phone"),
            employee_code=optional_text(employee_code, "Employee code"),
        )
        logger.info("user created user_id=%s role=%s by=%s", user_id, role.value, actor.user_id)
        return user_id

    def update_profile(
        self,
        actor: Actor,
        *,
        user_id: Optional[int] = None,
        full_name: Optional[str] = None,
        position: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> User:
        """Self-service profile edit; admins may edit profiles in their scope.

        Omitted fields keep their value, an empty string clears position and phone.
        """
        user = self._get(actor.user_id if user_id is None else user_id)
        ensure(authorize_record(actor, record_for_user(user)), actor=actor, action="edit-profile")

        ok = self._users.update_profile(
            user.user_id,
            full_name=require_non_empty(full_name, "Full name") if full_name is not None else user.full_name,
            position=optional_text(position, "Position") if position is not None else user.position,
            phone=optional_text(phone, "Phone") if phone is not None else user.phone,
        )
        if not ok:
            raise ValidationError("Failed to update profile")
        return self._get(user.user_id)

    def stats(self, actor: Actor) -> UserStats:
        """Head counts over the users the actor administers."""
        ensure_action(actor, "view-user-stats")
        if at_least(actor.role, Role.ORG_ADMIN) or actor.role is Role.HR:
            users = self._users.list_users(limit=STATS_LIMIT)
        elif actor.department_id is not None:
            users = self._users.list_users(dept_id=actor.department_id, limit=STATS_LIMIT)
        else:
            raise AuthorizationError(NOT_PERMITTED)

        by_role = {r.value: 0 for r in Role}
        per_dept: Dict[int, int] = {}
        for u in users:
            by_role[u.role.value] += 1
            if u.dept_id is not None:
                per_dept[u.dept_id] = per_dept.get(u.dept_id, 0) + 1

        names = {d.dept_id: d.dept_name for d in self._departments.list_all()}
        active = sum(1 for u in users if u.is_active)
        return UserStats(
            total_users=len(users),
            active_users=active,
            inactive_users=len(users) - active,
            by_role=by_role,
            by_department=[
                {"dept_id": dept_id, "dept_name": names.get(dept_id, "Unknown"), "count": count}
                for dept_id, count in sorted(per_dept.items())
            ],
        )

    def change_role(self, actor: Actor, *, user_id: int, role: Role) -> None:
        ensure_action(actor, "edit-user")
        self._ensure_not_self(actor, user_id)
        user = self._get(user_id)
        ensure(authorize_record(actor, record_for_user(user)), actor=actor, action="edit-user")
        self._ensure_can_grant(actor, role)

        if not self._users.update_role(user.user_id, role=role):
            raise ValidationError("Failed to update role")
        logger.info("role changed user_id=%s %s->%s by=%s", user.user_id, user.role.value, role.value, actor.user_id)

    def change_department(self, actor: Actor, *, user_id: int, dept_id: Optional[int]) -> None:
        ensure_action(actor, "edit-user")
        user = self._get(user_id)
        dept_id = self._ensure_department(dept_id)

        ensure(authorize_record(actor, record_for_user(user)), actor=actor, action="edit-user")
        # The destination department must be within the actor's scope too.
        destination = RecordContext(department_id=dept_id, owner_role=user.role)
        ensure(authorize_record(actor, destination), actor=actor, action="edit-user")

        if not self._users.update_department(user.user_id, dept_id=dept_id):
            raise ValidationError("Failed to update department")

    def set_active(self, actor: Actor, *, user_id: int, is_active: bool) -> None:
        ensure_action(actor, "edit-user")
        self._ensure_not_self(actor, user_id)
        user = self._get(user_id)
        ensure(authorize_record(actor, record_for_user(user)), actor=actor, action="edit-user")

        if not self._users.set_active(user.user_id, is_active=bool(is_active)):
            raise ValidationError("Failed to update account status")
        logger.info("user_id=%s active=%s by=%s", user.user_id, bool(is_active), actor.user_id)

    def delete_user(self, actor: Actor, *, user_id: int) -> None:
        ensure_action(actor, "delete-user")
        self._ensure_not_self(actor, user_id)
        user = self._get(user_id)
        ensure(authorize_record(actor, record_for_user(user)), actor=actor, action="delete-user")

        if not self._users.delete_by_id(user.user_id):
            raise ValidationError("Failed to delete user")


class DepartmentService:
    def __init__(self, departments: DepartmentRepository, users: UserRepository):
        self._departments = departments
        self._users = users

    def list_departments(self) -> Sequence[Department]:
        return self._departments.list_all()

    def _check_manager(self, manager_id: Optional[int]) -> Optional[int]:
        if manager_id is None:
            return None
        if not self._users.get_by_id(int(manager_id)):
            raise ValidationError("Manager does not exist")
        return int(manager_id)

    def create_department(
        self,
        actor: Actor,
        *,
        dept_name: str,
        description: Optional[str] = None,
        manager_id: Optional[int] = None,
    ) -> int:
        ensure_action(actor, "create-department")
        dept_name = require_non_empty(dept_name, "Department name")
        if self._departments.get_by_name(dept_name):
            raise ValidationError("Department already exists")
        return self._departments.create(
            dept_name=dept_name,
            description=optional_text(description, "Description"),
            manager_id=self._check_manager(manager_id),
        )

    def update_department(
        self,
        actor: Actor,
        *,
        dept_id: int,
        dept_name: str,
        description: Optional[str] = None,
        manager_id: Optional[int] = None,
    ) -> None:
        ensure_action(actor, "edit-department")
        dept = self._departments.get_by_id(int(dept_id))
        if not dept:
            raise NotFoundError("Department not found")
        ensure(
            authorize_record(actor, RecordContext(department_id=dept.dept_id)),
            actor=actor,
            action="edit-department",
        )

        ok = self._departments.update(
            dept.dept_id,
            dept_name=require_non_empty(dept_name, "Department name"),
            description=optional_text(description, "Description"),
            manager_id=self._check_manager(manager_id),
        )
        if not ok:
            raise ValidationError("Failed to update department")
