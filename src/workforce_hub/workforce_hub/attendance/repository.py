from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceReportRow


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_recent_for_user(self, user_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

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
        raise NotImplementedError

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
        raise NotImplementedError

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
        raise NotImplementedError

    def get_report_rows(
        self,
        *,
        start_date: Optional[date],
        end_date: Optional[date],
        dept_id: Optional[int] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError
