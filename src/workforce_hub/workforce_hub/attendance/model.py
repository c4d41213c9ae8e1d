from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from ..core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_WORKDAY_START, STANDARD_WORKDAY_HOURS
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance row per user per day."""

    attendance_id: int
    user_id: int
    work_date: date
    clock_in: Optional[datetime]
    clock_out: Optional[datetime]
    status: AttendanceStatus
    break_minutes: int = 0
    total_hours: Optional[Decimal] = None
    location: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for reports (joined with the user)."""

    user_id: int
    full_name: str
    dept_id: Optional[int]
    work_date: date
    clock_in: Optional[datetime]
    clock_out: Optional[datetime]
    total_hours: Optional[Decimal]
    status: AttendanceStatus


@dataclass(frozen=True)
class WorkdayPolicy:
    start: time = DEFAULT_WORKDAY_START
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES
    standard_hours: int = STANDARD_WORKDAY_HOURS

    @property
    def half_day_minutes(self) -> int:
        return self.standard_hours * 60 // 2


@dataclass(frozen=True)
class AttendanceStats:
    total_days: int
    present_days: int
    absent_days: int
    late_days: int
    half_days: int
    remote_days: int
    total_hours: Decimal
    average_hours: Decimal
    attendance_rate: Decimal
