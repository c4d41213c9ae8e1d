from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, optional_int
from .department_model import Department
from .department_repository import DepartmentRepository


def _to_department(row: dict) -> Department:
    return Department(
        dept_id=int(row["dept_id"]),
        dept_name=row["dept_name"],
        description=row.get("description"),
        manager_id=optional_int(row.get("manager_id")),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT dept_id, dept_name, description, manager_id, is_active FROM departments ORDER BY dept_name")
            return [_to_department(r) for r in fetchall(cur)]

    def get_by_id(self, dept_id: int) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT dept_id, dept_name, description, manager_id, is_active FROM departments WHERE dept_id=%s",
                (dept_id,),
            )
            row = fetchone(cur)
            return _to_department(row) if row else None

    def get_by_name(self, dept_name: str) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT dept_id, dept_name, description, manager_id, is_active FROM departments WHERE dept_name=%s",
                (dept_name,),
            )
            row = fetchone(cur)
            return _to_department(row) if row else None

    def create(self, *, dept_name: str, description: Optional[str], manager_id: Optional[int]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO departments(dept_name, description, manager_id, is_active) VALUES(%s,%s,%s,1)",
                (dept_name, description, manager_id),
            )
            return int(cur.lastrowid)

    def update(
        self,
        dept_id: int,
        *,
        dept_name: str,
        description: Optional[str],
        manager_id: Optional[int],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE departments SET dept_name=%s, description=%s, manager_id=%s WHERE dept_id=%s",
                (dept_name, description, manager_id, dept_id),
            )
            return cur.rowcount > 0
