"""Access Evaluator.

Pure functions deciding whether an actor may see a UI affordance (`Gate`)
or act on a record (`RecordContext`). Nothing here fetches data or keeps
state; callers supply everything a decision needs.

Denials are returned as `Decision` values. Only configuration mistakes
(unknown role, ambiguous gate) raise.
"""

from __future__ import annotations

from ..core.enums import Role
from ..core.exceptions import AmbiguousGateError
from .model import Actor, Decision, Gate, ReasonCode, RecordAction, RecordContext
from .ranking import at_least, to_role

APPROVER_ROLES = frozenset({Role.DEPT_ADMIN, Role.HR, Role.ORG_ADMIN, Role.SUPER_ADMIN})

# Owners a DEPT_ADMIN (or HR, when approving) can never act on.
_ABOVE_DEPARTMENT = frozenset({Role.ORG_ADMIN, Role.SUPER_ADMIN})


def evaluate_gate(actor: Actor, gate: Gate) -> Decision:
    if gate.required_roles is not None and gate.min_role is not None:
        raise AmbiguousGateError(f"Gate {gate.name!r} defines both required_roles and min_role")

    if not actor.is_active:
        return Decision.deny(ReasonCode.INACTIVE)

    role = to_role(actor.role)
    if gate.required_roles is not None:
        if role in {to_role(r) for r in gate.required_roles}:
            return Decision.allow()
        return Decision.deny(ReasonCode.ROLE_NOT_PERMITTED)

    if gate.min_role is not None:
        if at_least(role, gate.min_role):
            return Decision.allow()
        return Decision.deny(ReasonCode.INSUFFICIENT_RANK)

    return Decision.allow()


def authorize_record(
    actor: Actor,
    record: RecordContext,
    action: RecordAction = RecordAction.EDIT,
) -> Decision:
    """Decide whether `actor` may perform `action` on `record`.

    EDIT lets admins act within their scope and anyone act on their own
    record. APPROVE never lets an actor decide their own record, and needs
    an approver role (DEPT_ADMIN, HR, ORG_ADMIN, SUPER_ADMIN).
    """
    if not actor.is_active:
        return Decision.deny(ReasonCode.INACTIVE)

    role = to_role(actor.role)
    owner_role = to_role(record.owner_role) if record.owner_role is not None else None

    if action is RecordAction.APPROVE:
        if _is_owner(actor, record):
            return Decision.deny(ReasonCode.NOT_AUTHORIZED)
        if role not in APPROVER_ROLES:
            return Decision.deny(ReasonCode.NOT_AUTHORIZED)
        if role is Role.HR and owner_role not in _ABOVE_DEPARTMENT:
            return Decision.allow()

    if role is Role.SUPER_ADMIN:
        return Decision.allow()

    if role is Role.ORG_ADMIN and owner_role is not Role.SUPER_ADMIN:
        return Decision.allow()

    if role is Role.DEPT_ADMIN and _same_department(actor, record) and owner_role not in _ABOVE_DEPARTMENT:
        return Decision.allow()

    if action is RecordAction.EDIT and _is_owner(actor, record):
        return Decision.allow()

    return Decision.deny(ReasonCode.NOT_AUTHORIZED)


def _is_owner(actor: Actor, record: RecordContext) -> bool:
    return record.owner_id is not None and record.owner_id == actor.user_id


def _same_department(actor: Actor, record: RecordContext) -> bool:
    return actor.department_id is not None and record.department_id == actor.department_id
