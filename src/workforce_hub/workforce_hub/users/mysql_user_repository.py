from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, optional_int
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, email, full_name, password_hash, role, dept_id, position, phone, employee_code, is_active"


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        email=row["email"],
        full_name=row["full_name"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        dept_id=optional_int(row.get("dept_id")),
        position=row.get("position"),
        phone=row.get("phone"),
        employee_code=row.get("employee_code"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_users(self, *, dept_id: Optional[int] = None, limit: int = 200) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            if dept_id is None:
                cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY full_name LIMIT %s", (int(limit),))
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM users WHERE dept_id=%s ORDER BY full_name LIMIT %s",
                    (dept_id, int(limit)),
                )
            return [_to_user(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(email, full_name, password_hash, role, dept_id, position, phone, employee_code, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (email, full_name, password_hash, role.value, dept_id, position, phone, employee_code),
            )
            return int(cur.lastrowid)

    def update_profile(
        self,
        user_id: int,
        *,
        full_name: str,
        position: Optional[str],
        phone: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET full_name=%s, position=%s, phone=%s WHERE user_id=%s",
                (full_name, position, phone, user_id),
            )
            return cur.rowcount > 0

    def update_role(self, user_id: int, *, role: Role) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET role=%s WHERE user_id=%s", (role.value, user_id))
            return cur.rowcount > 0

    def update_department(self, user_id: int, *, dept_id: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET dept_id=%s WHERE user_id=%s", (dept_id, user_id))
            return cur.rowcount > 0

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET is_active=%s WHERE user_id=%s", (1 if is_active else 0, user_id))
            return cur.rowcount > 0

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (user_id,))
            return cur.rowcount > 0
