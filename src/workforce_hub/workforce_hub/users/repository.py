from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Services depend on this protocol, never on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def list_users(self, *, dept_id: Optional[int] = None, limit: int = 200) -> Sequence[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        email: str,
        full_name: str,
        password_hash: str,
        role: Role,
        dept_id: Optional[int],
        position: Optional[str] = None,
        phone: Optional[str] = None,
        employee_code: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_profile(
        self,
        user_id: int,
        *,
        full_name: str,
        position: Optional[str],
        phone: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def update_role(self, user_id: int, *, role: Role) -> bool:
        raise NotImplementedError

    def update_department(self, user_id: int, *, dept_id: Optional[int]) -> bool:
        raise NotImplementedError

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError
