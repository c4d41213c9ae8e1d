from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..users.model import User
from .actors import is_org_wide, record_for_user
from .catalog import check_action
from .evaluator import authorize_record
from .model import Actor, Decision

logger = logging.getLogger(__name__)

NOT_PERMITTED = "You are not permitted to perform this action"


def ensure(decision: Decision, *, actor: Actor, action: str) -> None:
    """Raise AuthorizationError for a denied decision.

    The reason code is logged for support; the raised message stays generic.
    """
    if decision.allowed:
        return
    logger.info(
        "access denied: action=%s user_id=%s role=%s reason=%s",
        action,
        actor.user_id,
        getattr(actor.role, "value", actor.role),
        decision.reason.value,
    )
    raise AuthorizationError(NOT_PERMITTED)


def ensure_action(actor: Actor, name: str) -> None:
    ensure(check_action(actor, name), actor=actor, action=name)


def stats_scope(
    actor: Actor,
    *,
    user_id: Optional[int],
    dept_id: Optional[int],
    gate: str,
    load_user: Callable[[int], User],
    action: str,
) -> Dict[str, int]:
    """Repository filter for a statistics query.

    One user: the actor, or someone whose records the actor may edit.
    One department: needs `gate`, and the actor's own department unless the
    actor is org-wide or HR. Neither: the actor alone.
    """
    if user_id is not None:
        if int(user_id) != actor.user_id:
            ensure(authorize_record(actor, record_for_user(load_user(int(user_id)))), actor=actor, action=action)
        return {"user_id": int(user_id)}
    if dept_id is not None:
        ensure_action(actor, gate)
        if not (is_org_wide(actor) or actor.role is Role.HR or int(dept_id) == actor.department_id):
            logger.info("access denied: action=%s user_id=%s dept_id=%s outside scope", action, actor.user_id, dept_id)
            raise AuthorizationError(NOT_PERMITTED)
        return {"dept_id": int(dept_id)}
    return {"user_id": actor.user_id}
