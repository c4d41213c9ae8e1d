from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone, optional_decimal, optional_int
from .model import AttendanceRecord, AttendanceReportRow
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, user_id, work_date, clock_in, clock_out, break_minutes, total_hours, status, location, notes"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        clock_in=r.get("clock_in"),
        clock_out=r.get("clock_out"),
        break_minutes=int(r.get("break_minutes") or 0),
        total_hours=optional_decimal(r.get("total_hours")),
        status=AttendanceStatus(r["status"]),
        location=r.get("location"),
        notes=r.get("notes"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE attendance_id=%s", (attendance_id,))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_recent_for_user(self, user_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE user_id=%s
                ORDER BY work_date DESC
                LIMIT %s
                """,
                (user_id, int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE user_id=%s AND work_date=%s", (user_id, work_date))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create_clock_in(
        self,
        *,
        user_id: int,
        work_date: date,
        clock_in: datetime,
        status: AttendanceStatus,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(user_id, work_date, clock_in, status, location, notes)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (user_id, work_date, clock_in, status.value, location, notes),
            )
            return int(cur.lastrowid)

    def update_clock_out(
        self,
        *,
        attendance_id: int,
        clock_out: datetime,
        break_minutes: int,
        total_hours: Decimal,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET clock_out=%s, break_minutes=%s, total_hours=%s, status=%s, notes=%s
                WHERE attendance_id=%s
                """,
                (clock_out, break_minutes, total_hours, status.value, notes, attendance_id),
            )
            return cur.rowcount > 0

    def update_record(
        self,
        *,
        attendance_id: int,
        clock_in: Optional[datetime],
        clock_out: Optional[datetime],
        break_minutes: int,
        total_hours: Optional[Decimal],
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET clock_in=%s, clock_out=%s, break_minutes=%s, total_hours=%s, status=%s, notes=%s
                WHERE attendance_id=%s
                """,
                (clock_in, clock_out, break_minutes, total_hours, status.value, notes, attendance_id),
            )
            return cur.rowcount > 0

    def get_report_rows(
        self,
        *,
        start_date: Optional[date],
        end_date: Optional[date],
        dept_id: Optional[int] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        where, params = build_where(
            [
                ("a.work_date>=%s", start_date),
                ("a.work_date<=%s", end_date),
                ("u.dept_id=%s", dept_id),
                ("a.user_id=%s", user_id),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT a.user_id, u.full_name, u.dept_id, a.work_date, a.clock_in, a.clock_out,
                       a.total_hours, a.status
                FROM attendance a
                JOIN users u ON u.user_id = a.user_id
                {where}
                ORDER BY u.full_name, a.work_date
                """,
                tuple(params),
            )
            return [
                AttendanceReportRow(
                    user_id=int(r["user_id"]),
                    full_name=r["full_name"],
                    dept_id=optional_int(r.get("dept_id")),
                    work_date=r["work_date"],
                    clock_in=r.get("clock_in"),
                    clock_out=r.get("clock_out"),
                    total_hours=optional_decimal(r.get("total_hours")),
                    status=AttendanceStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]
