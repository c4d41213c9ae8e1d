from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import ApprovalStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone, optional_int
from .model import LeaveRequest
from .repository import LeaveRepository

_COLUMNS = (
    "lr.request_id, lr.user_id, lr.leave_type, lr.start_date, lr.end_date, lr.days_requested, lr.reason, "
    "lr.status, lr.approved_by, lr.approved_at, lr.rejection_reason, lr.created_at"
)


def _to_request(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        user_id=int(r["user_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        days_requested=int(r["days_requested"]),
        reason=r.get("reason"),
        status=ApprovalStatus(r["status"]),
        approved_by=optional_int(r.get("approved_by")),
        approved_at=r.get("approved_at"),
        rejection_reason=r.get("rejection_reason"),
        created_at=r.get("created_at"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests lr WHERE lr.request_id=%s", (request_id,))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def create(
        self,
        *,
        user_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        days_requested: int,
        reason: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(user_id, leave_type, start_date, end_date, days_requested, reason, status)
                VALUES(%s,%s,%s,%s,%s,%s,'PENDING')
                """,
                (user_id, leave_type.value, start_date, end_date, days_requested, reason),
            )
            return int(cur.lastrowid)

    def update(
        self,
        request_id: int,
        *,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        days_requested: int,
        reason: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET leave_type=%s, start_date=%s, end_date=%s, days_requested=%s, reason=%s
                WHERE request_id=%s AND status='PENDING'
                """,
                (leave_type.value, start_date, end_date, days_requested, reason, int(request_id)),
            )
            return cur.rowcount > 0

    def find_overlapping(
        self,
        user_id: int,
        *,
        start_date: date,
        end_date: date,
        statuses: Iterable[ApprovalStatus],
        exclude_id: Optional[int] = None,
    ) -> Optional[LeaveRequest]:
        values = [s.value for s in statuses]
        placeholders = ",".join(["%s"] * len(values))
        params = [user_id, *values, end_date, start_date]
        exclude = ""
        if exclude_id is not None:
            exclude = "AND lr.request_id<>%s"
            params.append(int(exclude_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests lr
                WHERE lr.user_id=%s AND lr.status IN ({placeholders})
                  AND lr.start_date<=%s AND lr.end_date>=%s
                  {exclude}
                ORDER BY lr.start_date
                LIMIT 1
                """,
                tuple(params),
            )
            r = fetchone(cur)
            return _to_request(r) if r else None

    def list_requests(
        self,
        *,
        user_id: Optional[int] = None,
        dept_id: Optional[int] = None,
        status: Optional[ApprovalStatus] = None,
        year: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        where, params = build_where(
            [
                ("lr.user_id=%s", user_id),
                ("u.dept_id=%s", dept_id),
                ("lr.status=%s", status.value if status else None),
                ("YEAR(lr.start_date)=%s", year),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests lr
                JOIN users u ON u.user_id = lr.user_id
                {where}
                ORDER BY lr.created_at DESC, lr.request_id DESC
                LIMIT %s
                """,
                (*params, int(limit)),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def set_status(
        self,
        request_id: int,
        *,
        status: ApprovalStatus,
        decided_by: Optional[int] = None,
        decided_at: Optional[datetime] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, approved_by=%s, approved_at=%s, rejection_reason=%s
                WHERE request_id=%s
                """,
                (status.value, decided_by, decided_at, rejection_reason, int(request_id)),
            )
            return cur.rowcount > 0
