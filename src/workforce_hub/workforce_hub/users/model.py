from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Plain data object, no DB access here.
    """

    user_id: int
    email: str
    full_name: str
    password_hash: str
    role: Role
    dept_id: Optional[int]
    position: Optional[str] = None
    phone: Optional[str] = None
    employee_code: Optional[str] = None
    is_active: bool = True

    def to_public(self) -> dict:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role.value,
            "dept_id": self.dept_id,
            "position": self.position,
            "phone": self.phone,
            "employee_code": self.employee_code,
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class UserStats:
    total_users: int
    active_users: int
    inactive_users: int
    by_role: Dict[str, int] = field(default_factory=dict)
    by_department: List[Dict[str, object]] = field(default_factory=list)
