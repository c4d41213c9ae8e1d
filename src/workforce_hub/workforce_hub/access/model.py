from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Hashable, Optional

from ..core.enums import Role


class ReasonCode(str, Enum):
    """Why a decision came out the way it did.

    Only for logging and support diagnostics; `Decision.allowed` is the
    authoritative answer.
    """

    ALLOWED = "Allowed"
    INACTIVE = "Inactive"
    ROLE_NOT_PERMITTED = "RoleNotPermitted"
    INSUFFICIENT_RANK = "InsufficientRank"
    NOT_AUTHORIZED = "NotAuthorized"
    # Reported for telemetry only, the evaluator raises AmbiguousGateError instead.
    AMBIGUOUS_GATE = "AmbiguousGate"


class RecordAction(str, Enum):
    """Kind of operation requested on a record."""

    EDIT = "edit"
    APPROVE = "approve"


@dataclass(frozen=True)
class Actor:
    """Authenticated identity making a request."""

    role: Role
    user_id: Hashable
    department_id: Optional[Hashable] = None
    is_active: bool = True


@dataclass(frozen=True)
class Gate:
    """Named permission requirement on a UI element or operation.

    Use either `required_roles` (exact membership) or `min_role` (rank
    threshold), never both.
    """

    name: str
    required_roles: Optional[FrozenSet[Role]] = None
    min_role: Optional[Role] = None

    @classmethod
    def roles(cls, name: str, *roles: Role) -> "Gate":
        return cls(name=name, required_roles=frozenset(roles))

    @classmethod
    def at_least(cls, name: str, min_role: Role) -> "Gate":
        return cls(name=name, min_role=min_role)

    @classmethod
    def open(cls, name: str) -> "Gate":
        return cls(name=name)


@dataclass(frozen=True)
class RecordContext:
    """Ownership/department facts about a target record."""

    owner_id: Optional[Hashable] = None
    department_id: Optional[Hashable] = None
    owner_role: Optional[Role] = None


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: ReasonCode

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True, reason=ReasonCode.ALLOWED)

    @classmethod
    def deny(cls, reason: ReasonCode) -> "Decision":
        return cls(allowed=False, reason=reason)

    def __bool__(self) -> bool:
        return self.allowed

    def to_dict(self) -> dict:
        return {"allowed": self.allowed, "reasonCode": self.reason.value}
