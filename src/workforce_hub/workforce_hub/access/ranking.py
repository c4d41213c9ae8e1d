"""Total trust order over roles.

The rank table is built once at import time from `ROLE_ORDER` and never
mutated afterwards, so every function here is safe to call from any thread.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Union

from ..core.enums import Role
from ..core.exceptions import UnknownRoleError

ROLE_ORDER: tuple[Role, ...] = (
    Role.TRAINEE,
    Role.INTERN,
    Role.CONTRACTOR,
    Role.EMPLOYEE,
    Role.TEAM_LEAD,
    Role.PROJECT_MANAGER,
    Role.HR,
    Role.DEPT_ADMIN,
    Role.ORG_ADMIN,
    Role.SUPER_ADMIN,
)

ROLE_RANK: Mapping[Role, int] = MappingProxyType({role: rank for rank, role in enumerate(ROLE_ORDER)})

_DESCRIPTIONS = {
    Role.TRAINEE: "Trainee - Basic learning access",
    Role.INTERN: "Intern - Learning and supervised tasks",
    Role.CONTRACTOR: "Contractor - Project-specific access",
    Role.EMPLOYEE: "Employee - Standard user access",
    Role.TEAM_LEAD: "Team Lead - Team management access",
    Role.PROJECT_MANAGER: "Project Manager - Project oversight access",
    Role.HR: "HR - Human resources operations",
    Role.DEPT_ADMIN: "Department Admin - Department management",
    Role.ORG_ADMIN: "Organization Admin - Organization-wide access",
    Role.SUPER_ADMIN: "Super Admin - Full system access",
}


def to_role(value: Union[Role, str]) -> Role:
    """Coerce a stored/session value into a Role, or raise UnknownRoleError."""
    if isinstance(value, Role):
        return value
    try:
        return Role(str(value).upper())
    except ValueError:
        raise UnknownRoleError(f"Unknown role: {value!r}") from None


def rank_of(role: Union[Role, str]) -> int:
    return ROLE_RANK[to_role(role)]


def at_least(role: Union[Role, str], min_role: Union[Role, str]) -> bool:
    return rank_of(role) >= rank_of(min_role)


def is_higher(role: Union[Role, str], other: Union[Role, str]) -> bool:
    return rank_of(role) > rank_of(other)


def permission_level(role: Union[Role, str]) -> str:
    return _DESCRIPTIONS[to_role(role)]
