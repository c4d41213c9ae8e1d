from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone, optional_int
from .model import TimeEntry
from .repository import TimeEntryRepository

_COLUMNS = "entry_id, user_id, task_id, project_id, description, start_time, end_time, duration_minutes, is_billable"


def _to_entry(row: dict) -> TimeEntry:
    return TimeEntry(
        entry_id=int(row["entry_id"]),
        user_id=int(row["user_id"]),
        task_id=optional_int(row.get("task_id")),
        project_id=optional_int(row.get("project_id")),
        description=row.get("description"),
        start_time=row["start_time"],
        end_time=row.get("end_time"),
        duration_minutes=optional_int(row.get("duration_minutes")),
        is_billable=bool(row.get("is_billable", False)),
    )


class MySQLTimeEntryRepository(TimeEntryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM time_entries WHERE entry_id=%s", (entry_id,))
            row = fetchone(cur)
            return _to_entry(row) if row else None

    def get_running(self, user_id: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM time_entries WHERE user_id=%s AND end_time IS NULL ORDER BY start_time DESC LIMIT 1",
                (user_id,),
            )
            row = fetchone(cur)
            return _to_entry(row) if row else None

    def create(
        self,
        *,
        user_id: int,
        start_time: datetime,
        end_time: Optional[datetime],
        duration_minutes: Optional[int],
        task_id: Optional[int],
        project_id: Optional[int],
        description: Optional[str],
        is_billable: bool,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO time_entries(user_id, task_id, project_id, description, start_time, end_time, duration_minutes, is_billable)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (user_id, task_id, project_id, description, start_time, end_time, duration_minutes, 1 if is_billable else 0),
            )
            return int(cur.lastrowid)

    def stop(self, entry_id: int, *, end_time: datetime, duration_minutes: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE time_entries SET end_time=%s, duration_minutes=%s WHERE entry_id=%s AND end_time IS NULL",
                (end_time, duration_minutes, entry_id),
            )
            return cur.rowcount > 0

    def list_for_user(
        self,
        user_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: int = 200,
    ) -> Sequence[TimeEntry]:
        where, params = build_where(
            [
                ("user_id=%s", user_id),
                ("start_time>=%s", start),
                ("start_time<%s", end + timedelta(days=1) if end else None),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM time_entries {where} ORDER BY start_time DESC LIMIT %s",
                (*params, int(limit)),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def delete_by_id(self, entry_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM time_entries WHERE entry_id=%s", (entry_id,))
            return cur.rowcount > 0
