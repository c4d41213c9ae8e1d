from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import Priority, ProjectStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone, optional_decimal
from .model import Project
from .repository import ProjectRepository

_COLUMNS = "project_id, name, description, status, priority, dept_id, manager_id, start_date, end_date, budget"


def _to_project(row: dict) -> Project:
    return Project(
        project_id=int(row["project_id"]),
        name=row["name"],
        description=row.get("description"),
        status=ProjectStatus(row["status"]),
        priority=Priority(row["priority"]),
        dept_id=int(row["dept_id"]),
        manager_id=int(row["manager_id"]),
        start_date=row.get("start_date"),
        end_date=row.get("end_date"),
        budget=optional_decimal(row.get("budget")),
    )


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, project_id: int) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM projects WHERE project_id=%s", (project_id,))
            row = fetchone(cur)
            return _to_project(row) if row else None

    def list_projects(
        self,
        *,
        dept_id: Optional[int] = None,
        manager_id: Optional[int] = None,
        status: Optional[ProjectStatus] = None,
        limit: int = 200,
    ) -> Sequence[Project]:
        where, params = build_where(
            [
                ("dept_id=%s", dept_id),
                ("manager_id=%s", manager_id),
                ("status=%s", status.value if status else None),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM projects {where} ORDER BY created_at DESC LIMIT %s", (*params, int(limit)))
            return [_to_project(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        name: str,
        description: Optional[str],
        dept_id: int,
        manager_id: int,
        priority: Priority,
        start_date: Optional[date],
        end_date: Optional[date],
        budget: Optional[Decimal],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO projects(name, description, dept_id, manager_id, priority, start_date, end_date, budget)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (name, description, dept_id, manager_id, priority.value, start_date, end_date, budget),
            )
            return int(cur.lastrowid)

    def update(
        self,
        project_id: int,
        *,
        name: str,
        description: Optional[str],
        priority: Priority,
        start_date: Optional[date],
        end_date: Optional[date],
        budget: Optional[Decimal],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE projects
                SET name=%s, description=%s, priority=%s, start_date=%s, end_date=%s, budget=%s
                WHERE project_id=%s
                """,
                (name, description, priority.value, start_date, end_date, budget, project_id),
            )
            return cur.rowcount > 0

    def update_status(self, project_id: int, *, status: ProjectStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE projects SET status=%s WHERE project_id=%s", (status.value, project_id))
            return cur.rowcount > 0

    def delete_by_id(self, project_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM projects WHERE project_id=%s", (project_id,))
            return cur.rowcount > 0
