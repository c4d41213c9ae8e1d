"""Named gates for navigation items and actions.

One table for the whole app: controllers gate endpoints with `check_action`
and the `/api/auth/me` endpoint reports `visible_navigation` so the client
only renders what the user may open.

HR-domain gates list their roles explicitly instead of using
`min_role=Role.HR`, so HR's lateral powers never leak to roles that merely
outrank it.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, List, Mapping

from ..core.enums import Role
from ..core.exceptions import UnknownGateError
from .evaluator import evaluate_gate
from .model import Actor, Decision, Gate

R = Role

_ADMINS = (R.SUPER_ADMIN, R.ORG_ADMIN, R.DEPT_ADMIN)

NAVIGATION: tuple[Gate, ...] = (
    Gate.open("dashboard"),
    Gate.open("tasks"),
    Gate.open("time"),
    Gate.open("attendance"),
    Gate.open("leave"),
    Gate.open("expenses"),
    Gate.roles("users", *_ADMINS),
    Gate.open("team"),
    Gate.open("calendar"),
    Gate.at_least("analytics", R.TEAM_LEAD),
    Gate.roles("hr-operations", R.HR, *_ADMINS),
    Gate.roles("payroll", R.HR, R.ORG_ADMIN, R.SUPER_ADMIN),
    Gate.open("reports"),
    Gate.open("documents"),
    Gate.roles("system-config", R.SUPER_ADMIN),
    Gate.open("settings"),
)

ACTIONS: tuple[Gate, ...] = (
    Gate.roles("create-user", *_ADMINS),
    Gate.roles("edit-user", *_ADMINS),
    Gate.roles("delete-user", R.SUPER_ADMIN, R.ORG_ADMIN),
    Gate.roles("view-user-stats", *_ADMINS, R.HR),
    Gate.roles("create-department", R.SUPER_ADMIN, R.ORG_ADMIN),
    Gate.roles("edit-department", *_ADMINS),
    Gate.roles("delete-department", R.SUPER_ADMIN, R.ORG_ADMIN),
    Gate.roles("create-project", *_ADMINS, R.PROJECT_MANAGER),
    Gate.roles("edit-project", *_ADMINS, R.PROJECT_MANAGER),
    Gate.roles("delete-project", *_ADMINS),
    Gate.roles("create-task", *_ADMINS, R.PROJECT_MANAGER, R.TEAM_LEAD),
    Gate.roles("edit-task", *_ADMINS, R.PROJECT_MANAGER, R.TEAM_LEAD, R.EMPLOYEE),
    Gate.roles("delete-task", *_ADMINS, R.PROJECT_MANAGER, R.TEAM_LEAD),
    Gate.roles("approve-leave", *_ADMINS, R.HR),
    Gate.roles("approve-expense", *_ADMINS, R.HR),
    Gate.roles("process-payroll", R.SUPER_ADMIN, R.ORG_ADMIN, R.HR),
    Gate.at_least("view-team-attendance", R.TEAM_LEAD),
    Gate.roles("edit-attendance", *_ADMINS),
    Gate.roles("system-config", R.SUPER_ADMIN),
    Gate.roles("backup-restore", R.SUPER_ADMIN),
    Gate.roles("security-settings", R.SUPER_ADMIN),
)


def _index(gates: Iterable[Gate]) -> Mapping[str, Gate]:
    return MappingProxyType({g.name: g for g in gates})


_NAVIGATION_BY_NAME = _index(NAVIGATION)
_ACTIONS_BY_NAME = _index(ACTIONS)


def action_gate(name: str) -> Gate:
    try:
        return _ACTIONS_BY_NAME[name]
    except KeyError:
        raise UnknownGateError(f"Unknown action gate: {name!r}") from None


def navigation_gate(name: str) -> Gate:
    try:
        return _NAVIGATION_BY_NAME[name]
    except KeyError:
        raise UnknownGateError(f"Unknown navigation gate: {name!r}") from None


def check_action(actor: Actor, name: str) -> Decision:
    return evaluate_gate(actor, action_gate(name))


def visible_navigation(actor: Actor) -> List[str]:
    return [g.name for g in NAVIGATION if evaluate_gate(actor, g).allowed]


def allowed_actions(actor: Actor) -> List[str]:
    return [g.name for g in ACTIONS if evaluate_gate(actor, g).allowed]
