from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time
from decimal import Decimal

import pytest

from src.workforce_hub.workforce_hub.access.actors import actor_from_user
from src.workforce_hub.workforce_hub.attendance.model import AttendanceRecord, AttendanceReportRow, WorkdayPolicy
from src.workforce_hub.workforce_hub.attendance.service import AttendanceService
from src.workforce_hub.workforce_hub.core.enums import AttendanceStatus, Role
from src.workforce_hub.workforce_hub.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.workforce_hub.workforce_hub.users.model import User

ENG, SALES = 1, 2

USERS = {
    1: User(1, "dev@example.com", "Dev", "x", Role.EMPLOYEE, ENG),
    2: User(2, "lead@example.com", "Lead", "x", Role.TEAM_LEAD, ENG),
    3: User(3, "hr@example.com", "HR", "x", Role.HR, None),
    4: User(4, "sales@example.com", "Sal", "x", Role.EMPLOYEE, SALES),
    5: User(5, "eng.admin@example.com", "Eng Admin", "x", Role.DEPT_ADMIN, ENG),
    6: User(6, "sales.admin@example.com", "Sales Admin", "x", Role.DEPT_ADMIN, SALES),
}


class InMemoryUsers:
    def get_by_id(self, user_id):
        return USERS.get(int(user_id))


class InMemoryAttendance:
    def __init__(self):
        self.records: dict[int, AttendanceRecord] = {}
        self.report_calls = []

    def get_by_id(self, attendance_id):
        return self.records.get(int(attendance_id))

    def get_recent_for_user(self, user_id, limit):
        rows = [r for r in self.records.values() if r.user_id == user_id]
        return sorted(rows, key=lambda r: r.work_date, reverse=True)[:limit]

    def get_for_user_and_date(self, user_id, work_date):
        return next((r for r in self.records.values() if r.user_id == user_id and r.work_date == work_date), None)

    def create_clock_in(self, *, user_id, work_date, clock_in, status, location=None, notes=None):
        aid = len(self.records) + 1
        self.records[aid] = AttendanceRecord(
            attendance_id=aid,
            user_id=user_id,
            work_date=work_date,
            clock_in=clock_in,
            clock_out=None,
            status=status,
            location=location,
            notes=notes,
        )
        return aid

    def update_clock_out(self, *, attendance_id, clock_out, break_minutes, total_hours, status, notes=None):
        self.records[attendance_id] = replace(
            self.records[attendance_id],
            clock_out=clock_out,
            break_minutes=break_minutes,
            total_hours=total_hours,
            status=status,
            notes=notes,
        )
        return True

    def update_record(self, *, attendance_id, clock_in, clock_out, break_minutes, total_hours, status, notes=None):
        self.records[attendance_id] = replace(
            self.records[attendance_id],
            clock_in=clock_in,
            clock_out=clock_out,
            break_minutes=break_minutes,
            total_hours=total_hours,
            status=status,
            notes=notes,
        )
        return True

    def get_report_rows(self, *, start_date, end_date, dept_id=None, user_id=None):
        self.report_calls.append(dept_id)
        rows = []
        for r in self.records.values():
            user = USERS[r.user_id]
            if start_date is not None and r.work_date < start_date:
                continue
            if end_date is not None and r.work_date > end_date:
                continue
            if user_id is not None and r.user_id != user_id:
                continue
            if dept_id is not None and user.dept_id != dept_id:
                continue
            rows.append(
                AttendanceReportRow(
                    user_id=r.user_id,
                    full_name=user.full_name,
                    dept_id=user.dept_id,
                    work_date=r.work_date,
                    clock_in=r.clock_in,
                    clock_out=r.clock_out,
                    total_hours=r.total_hours,
                    status=r.status,
                )
            )
        return rows


@pytest.fixture
def repo():
    return InMemoryAttendance()


@pytest.fixture
def service(repo):
    return AttendanceService(repo, InMemoryUsers(), policy=WorkdayPolicy(start=time(9, 0), grace_minutes=15))


def _as(user_id):
    return actor_from_user(USERS[user_id])


def test_clock_in_on_time_then_late_for_another_user(service, repo):
    service.clock_in(_as(1), now=datetime(2025, 5, 5, 9, 15))
    service.clock_in(_as(4), now=datetime(2025, 5, 5, 9, 16))

    assert repo.get_for_user_and_date(1, date(2025, 5, 5)).status == AttendanceStatus.PRESENT
    late = repo.get_for_user_and_date(4, date(2025, 5, 5))
    assert late.status == AttendanceStatus.LATE
    assert late.notes == "Late by 16 minutes"


def test_clock_in_once_per_day(service):
    service.clock_in(_as(1), now=datetime(2025, 5, 5, 8, 55))
    with pytest.raises(ValidationError):
        service.clock_in(_as(1), now=datetime(2025, 5, 5, 13, 0))


def test_remote_clock_in(service, repo):
    service.clock_in(_as(1), now=datetime(2025, 5, 5, 10, 30), remote=True, location=" Home ")
    record = repo.get_for_user_and_date(1, date(2025, 5, 5))
    assert record.status == AttendanceStatus.WORK_FROM_HOME
    assert record.location == "Home"


def test_clock_out_computes_hours_minus_break(service):
    service.clock_in(_as(1), now=datetime(2025, 5, 5, 9, 0))
    record = service.clock_out(_as(1), now=datetime(2025, 5, 5, 17, 30), break_minutes=30)

    assert record.total_hours == Decimal("8.00")
    assert record.status == AttendanceStatus.PRESENT


def test_short_day_becomes_half_day(service):
    service.clock_in(_as(1), now=datetime(2025, 5, 5, 9, 0))
    record = service.clock_out(_as(1), now=datetime(2025, 5, 5, 12, 0))
    assert record.status == AttendanceStatus.HALF_DAY
    assert record.total_hours == Decimal("3.00")


def test_clock_out_requires_clock_in_and_only_once(service):
    with pytest.raises(ValidationError):
        service.clock_out(_as(1), now=datetime(2025, 5, 5, 17, 0))

    service.clock_in(_as(1), now=datetime(2025, 5, 5, 9, 0))
    service.clock_out(_as(1), now=datetime(2025, 5, 5, 17, 0))
    with pytest.raises(ValidationError):
        service.clock_out(_as(1), now=datetime(2025, 5, 5, 18, 0))


def test_break_longer_than_shift_is_rejected(service):
    service.clock_in(_as(1), now=datetime(2025, 5, 5, 9, 0))
    with pytest.raises(ValidationError):
        service.clock_out(_as(1), now=datetime(2025, 5, 5, 10, 0), break_minutes=60)


def test_history_of_others_needs_authority(service):
    service.clock_in(_as(1), now=datetime(2025, 5, 5, 9, 0))
    assert len(service.history(_as(1))) == 1
    with pytest.raises(AuthorizationError):
        service.history(_as(4), user_id=1)


def test_team_report_is_scoped_to_own_department(service, repo):
    service.clock_in(_as(1), now=datetime(2025, 5, 5, 9, 0))
    service.clock_out(_as(1), now=datetime(2025, 5, 5, 17, 0))
    service.clock_in(_as(1), now=datetime(2025, 5, 6, 9, 40))
    service.clock_in(_as(4), now=datetime(2025, 5, 6, 9, 0))

    summary = service.department_report(_as(2), start_date=date(2025, 5, 1), end_date=date(2025, 5, 31))
    assert repo.report_calls[-1] == ENG
    assert len(summary) == 1
    assert summary[0].days_recorded == 2
    assert summary[0].late_days == 1
    assert summary[0].total_hours == Decimal("8.00")

    with pytest.raises(AuthorizationError):
        service.department_report(_as(2), start_date=date(2025, 5, 1), end_date=date(2025, 5, 31), dept_id=SALES)


def test_hr_reports_any_department_and_employees_cannot(service):
    assert service.department_report(_as(3), start_date=date(2025, 5, 1), end_date=date(2025, 5, 2), dept_id=SALES) == []
    with pytest.raises(AuthorizationError):
        service.department_report(_as(1), start_date=date(2025, 5, 1), end_date=date(2025, 5, 2))
    with pytest.raises(ValidationError):
        service.department_report(_as(3), start_date=date(2025, 5, 2), end_date=date(2025, 5, 1))


def _seed_week(service, repo):
    service.clock_in(_as(1), now=datetime(2025, 5, 5, 9, 0))
    service.clock_out(_as(1), now=datetime(2025, 5, 5, 17, 0))
    service.clock_in(_as(1), now=datetime(2025, 5, 6, 9, 40))
    repo.records[3] = AttendanceRecord(3, 1, date(2025, 5, 7), None, None, AttendanceStatus.ABSENT)
    service.clock_in(_as(4), now=datetime(2025, 5, 6, 9, 0))


def test_stats_for_own_records(service, repo):
    _seed_week(service, repo)

    stats = service.stats(_as(1))
    assert stats.total_days == 3
    assert (stats.present_days, stats.late_days, stats.absent_days) == (1, 1, 1)
    assert stats.total_hours == Decimal("8.00")
    assert stats.average_hours == Decimal("2.67")
    assert stats.attendance_rate == Decimal("66.67")

    window = service.stats(_as(1), start_date=date(2025, 5, 6), end_date=date(2025, 5, 7))
    assert window.total_days == 2
    assert window.total_hours == Decimal("0")


def test_stats_without_records_are_zero(service):
    stats = service.stats(_as(4))
    assert stats.total_days == 0
    assert stats.average_hours == Decimal("0")
    assert stats.attendance_rate == Decimal("0")


def test_stats_reject_reversed_period(service):
    with pytest.raises(ValidationError):
        service.stats(_as(1), start_date=date(2025, 5, 7), end_date=date(2025, 5, 6))


def test_department_stats_are_scoped(service, repo):
    _seed_week(service, repo)

    assert service.stats(_as(2), dept_id=ENG).total_days == 3
    assert service.stats(_as(3), dept_id=SALES).total_days == 1
    with pytest.raises(AuthorizationError):
        service.stats(_as(2), dept_id=SALES)
    with pytest.raises(AuthorizationError):
        service.stats(_as(1), dept_id=ENG)


def test_stats_for_another_user_need_record_authority(service, repo):
    _seed_week(service, repo)

    assert service.stats(_as(5), user_id=1).total_days == 3
    with pytest.raises(AuthorizationError):
        service.stats(_as(4), user_id=1)
    with pytest.raises(AuthorizationError):
        service.stats(_as(6), user_id=1)


def test_admin_corrects_missing_clock_out(service, repo):
    _seed_week(service, repo)

    record = service.update_record(
        _as(5),
        attendance_id=2,
        clock_out=datetime(2025, 5, 6, 18, 0),
        break_minutes=20,
        status=AttendanceStatus.PRESENT,
        notes=" Badge reader fault ",
    )
    assert record.total_hours == Decimal("8.00")
    assert record.status == AttendanceStatus.PRESENT
    assert record.notes == "Badge reader fault"
    assert repo.records[2] == record


def test_correcting_clock_in_recomputes_hours(service, repo):
    _seed_week(service, repo)

    record = service.update_record(_as(5), attendance_id=1, clock_in=datetime(2025, 5, 5, 8, 30))
    assert record.clock_out == datetime(2025, 5, 5, 17, 0)
    assert record.total_hours == Decimal("8.50")
    assert record.status == AttendanceStatus.PRESENT


@pytest.mark.parametrize(
    "changes",
    [
        {"clock_out": datetime(2025, 5, 5, 8, 0)},
        {"clock_in": datetime(2025, 5, 4, 9, 0)},
        {"break_minutes": 480},
        {"break_minutes": -5},
    ],
)
def test_invalid_corrections_are_rejected(service, repo, changes):
    _seed_week(service, repo)
    with pytest.raises(ValidationError):
        service.update_record(_as(5), attendance_id=1, **changes)


def test_clock_out_correction_needs_a_clock_in(service, repo):
    _seed_week(service, repo)
    with pytest.raises(ValidationError):
        service.update_record(_as(5), attendance_id=3, clock_out=datetime(2025, 5, 7, 17, 0))


@pytest.mark.parametrize("user_id", [1, 2, 6])
def test_corrections_need_an_admin_in_scope(service, repo, user_id):
    _seed_week(service, repo)
    with pytest.raises(AuthorizationError):
        service.update_record(_as(user_id), attendance_id=1, break_minutes=10)


def test_correcting_unknown_record(service):
    with pytest.raises(NotFoundError):
        service.update_record(_as(5), attendance_id=99, break_minutes=10)
