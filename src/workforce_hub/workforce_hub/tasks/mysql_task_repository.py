from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import Priority, TaskStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone, optional_decimal, optional_int
from .model import Task
from .repository import TaskRepository

_COLUMNS = (
    "t.task_id, t.title, t.description, t.status, t.priority, t.project_id, t.assignee_id, "
    "t.reporter_id, t.due_date, t.estimated_hours, t.actual_hours"
)


def _to_task(row: dict) -> Task:
    return Task(
        task_id=int(row["task_id"]),
        title=row["title"],
        description=row.get("description"),
        status=TaskStatus(row["status"]),
        priority=Priority(row["priority"]),
        project_id=int(row["project_id"]),
        assignee_id=optional_int(row.get("assignee_id")),
        reporter_id=int(row["reporter_id"]),
        due_date=row.get("due_date"),
        estimated_hours=optional_decimal(row.get("estimated_hours")),
        actual_hours=optional_decimal(row.get("actual_hours")),
    )


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, task_id: int) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM tasks t WHERE t.task_id=%s", (task_id,))
            row = fetchone(cur)
            return _to_task(row) if row else None

    def list_tasks(
        self,
        *,
        project_id: Optional[int] = None,
        assignee_id: Optional[int] = None,
        dept_id: Optional[int] = None,
        limit: int = 500,
    ) -> Sequence[Task]:
        where, params = build_where(
            [
                ("t.project_id=%s", project_id),
                ("t.assignee_id=%s", assignee_id),
                ("p.dept_id=%s", dept_id),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM tasks t
                JOIN projects p ON p.project_id = t.project_id
                {where}
                ORDER BY t.due_date IS NULL, t.due_date, t.task_id
                LIMIT %s
                """,
                (*params, int(limit)),
            )
            return [_to_task(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        title: str,
        description: Optional[str],
        project_id: int,
        reporter_id: int,
        assignee_id: Optional[int],
        priority: Priority,
        due_date: Optional[date],
        estimated_hours: Optional[Decimal],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tasks(title, description, project_id, reporter_id, assignee_id, priority, due_date, estimated_hours)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (title, description, project_id, reporter_id, assignee_id, priority.value, due_date, estimated_hours),
            )
            return int(cur.lastrowid)

    def update_details(
        self,
        task_id: int,
        *,
        title: str,
        description: Optional[str],
        priority: Priority,
        due_date: Optional[date],
        estimated_hours: Optional[Decimal],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE tasks
                SET title=%s, description=%s, priority=%s, due_date=%s, estimated_hours=%s
                WHERE task_id=%s
                """,
                (title, description, priority.value, due_date, estimated_hours, task_id),
            )
            return cur.rowcount > 0

    def update_status(self, task_id: int, *, status: TaskStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE tasks SET status=%s WHERE task_id=%s", (status.value, task_id))
            return cur.rowcount > 0

    def assign(self, task_id: int, *, assignee_id: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE tasks SET assignee_id=%s WHERE task_id=%s", (assignee_id, task_id))
            return cur.rowcount > 0

    def log_hours(self, task_id: int, *, actual_hours: Decimal) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE tasks SET actual_hours=%s WHERE task_id=%s", (actual_hours, task_id))
            return cur.rowcount > 0

    def delete_by_id(self, task_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM tasks WHERE task_id=%s", (task_id,))
            return cur.rowcount > 0
