from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Sequence

from ..access.actors import is_org_wide, record_for_user
from ..access.evaluator import authorize_record
from ..access.guard import NOT_PERMITTED, ensure, ensure_action, stats_scope
from ..access.model import Actor
from ..common.datetime_utils import now_local, to_naive_local
from ..common.validators import optional_text, require_date_range
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, AttendanceReportRow, AttendanceStats, WorkdayPolicy
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceSummary:
    """Per-user totals in a department report."""

    user_id: int
    full_name: str
    days_recorded: int
    late_days: int
    half_days: int
    remote_days: int
    total_hours: Decimal


def _hours(minutes: int) -> Decimal:
    return (Decimal(minutes) / Decimal(60)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
        policy: Optional[WorkdayPolicy] = None,
    ):
        self._attendance = attendance
        self._users = users
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._policy = policy or WorkdayPolicy()

    @property
    def policy(self) -> WorkdayPolicy:
        return self._policy

    def clock_in(
        self,
        actor: Actor,
        *,
        now: Optional[datetime] = None,
        remote: bool = False,
        location: Optional[str] = None,
    ) -> int:
        now = now or now_local()
        today = now.date()

        if self._attendance.get_for_user_and_date(actor.user_id, today):
            raise ValidationError("You have already clocked in today")

        strategy = self._factory.for_clock_in(now=now, today=today, policy=self._policy, remote=remote)
        decision = strategy.decide_clock_in(now=now, today=today, policy=self._policy)

        attendance_id = self._attendance.create_clock_in(
            user_id=actor.user_id,
            work_date=today,
            clock_in=now,
            status=decision.status,
            location=optional_text(location, "Location"),
            notes=decision.note,
        )
        logger.info("clock in user_id=%s status=%s", actor.user_id, decision.status.value)
        return attendance_id

    def clock_out(self, actor: Actor, *, now: Optional[datetime] = None, break_minutes: int = 0) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()

        record = self._attendance.get_for_user_and_date(actor.user_id, today)
        if not record or record.clock_in is None:
            raise ValidationError("You have not clocked in today")
        if record.clock_out is not None:
            raise ValidationError("You have already clocked out today")
        if now <= record.clock_in:
            raise ValidationError("Clock out must be after clock in")

        break_minutes = int(break_minutes or 0)
        elapsed = int((now - record.clock_in).total_seconds() // 60)
        if break_minutes < 0 or break_minutes >= elapsed:
            raise ValidationError("Break must be shorter than the time worked")
        worked = elapsed - break_minutes

        strategy = self._factory.for_clock_out(current_status=record.status)
        decision = strategy.decide_clock_out(worked_minutes=worked, policy=self._policy, current=record.status)
        total = _hours(worked)

        self._attendance.update_clock_out(
            attendance_id=record.attendance_id,
            clock_out=now,
            break_minutes=break_minutes,
            total_hours=total,
            status=decision.status,
            notes=decision.note or record.notes,
        )
        return AttendanceRecord(
            attendance_id=record.attendance_id,
            user_id=record.user_id,
            work_date=record.work_date,
            clock_in=record.clock_in,
            clock_out=now,
            status=decision.status,
            break_minutes=break_minutes,
            total_hours=total,
            location=record.location,
            notes=decision.note or record.notes,
        )

    def today(self, actor: Actor, *, today: Optional[date] = None) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_user_and_date(actor.user_id, today or now_local().date())

    def history(
        self,
        actor: Actor,
        *,
        user_id: Optional[int] = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> Sequence[AttendanceRecord]:
        target = actor.user_id if user_id is None else int(user_id)
        if target != actor.user_id:
            ensure(authorize_record(actor, record_for_user(self._user(target))), actor=actor, action="view-attendance")
        return self._attendance.get_recent_for_user(target, int(limit))

    def _user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_record(
        self,
        actor: Actor,
        *,
        attendance_id: int,
        clock_in: Optional[datetime] = None,
        clock_out: Optional[datetime] = None,
        break_minutes: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        """Correct a stored record; omitted fields keep their value and hours are recomputed."""
        ensure_action(actor, "edit-attendance")
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")
        owner = self._user(record.user_id)
        ensure(authorize_record(actor, record_for_user(owner)), actor=actor, action="edit-attendance")

        clock_in = to_naive_local(clock_in) if clock_in is not None else record.clock_in
        clock_out = to_naive_local(clock_out) if clock_out is not None else record.clock_out
        break_minutes = record.break_minutes if break_minutes is None else int(break_minutes)
        if clock_in is not None and clock_in.date() != record.work_date:
            raise ValidationError("Clock in must fall on the work date")

        total = None
        if clock_out is not None:
            if clock_in is None:
                raise ValidationError("Clock out requires a clock in")
            if clock_out <= clock_in:
                raise ValidationError("Clock out must be after clock in")
            elapsed = int((clock_out - clock_in).total_seconds() // 60)
            if break_minutes < 0 or break_minutes >= elapsed:
                raise ValidationError("Break must be shorter than the time worked")
            total = _hours(elapsed - break_minutes)

        updated = replace(
            record,
            clock_in=clock_in,
            clock_out=clock_out,
            break_minutes=break_minutes,
            total_hours=total,
            status=status or record.status,
            notes=record.notes if notes is None else optional_text(notes, "Notes"),
        )
        self._attendance.update_record(
            attendance_id=updated.attendance_id,
            clock_in=updated.clock_in,
            clock_out=updated.clock_out,
            break_minutes=updated.break_minutes,
            total_hours=updated.total_hours,
            status=updated.status,
            notes=updated.notes,
        )
        logger.info("attendance corrected attendance_id=%s by user_id=%s", updated.attendance_id, actor.user_id)
        return updated

    def _report_department(self, actor: Actor, dept_id: Optional[int]) -> Optional[int]:
        if is_org_wide(actor) or actor.role is Role.HR:
            return dept_id
        if actor.department_id is None:
            raise AuthorizationError(NOT_PERMITTED)
        if dept_id is not None and int(dept_id) != actor.department_id:
            raise AuthorizationError(NOT_PERMITTED)
        return actor.department_id

    def report_rows(
        self,
        actor: Actor,
        *,
        start_date: date,
        end_date: date,
        dept_id: Optional[int] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        ensure_action(actor, "view-team-attendance")
        require_date_range(start_date, end_date)
        return self._attendance.get_report_rows(
            start_date=start_date,
            end_date=end_date,
            dept_id=self._report_department(actor, dept_id),
            user_id=user_id,
        )

    def department_report(
        self,
        actor: Actor,
        *,
        start_date: date,
        end_date: date,
        dept_id: Optional[int] = None,
    ) -> List[AttendanceSummary]:
        """Totals per user for the period, ordered by name."""
        rows = self.report_rows(actor, start_date=start_date, end_date=end_date, dept_id=dept_id)

        grouped: Dict[int, List[AttendanceReportRow]] = {}
        for row in rows:
            grouped.setdefault(row.user_id, []).append(row)

        summaries = []
        for user_id, user_rows in grouped.items():
            statuses = [r.status for r in user_rows]
            summaries.append(
                AttendanceSummary(
                    user_id=user_id,
                    full_name=user_rows[0].full_name,
                    days_recorded=len(user_rows),
                    late_days=statuses.count(AttendanceStatus.LATE),
                    half_days=statuses.count(AttendanceStatus.HALF_DAY),
                    remote_days=statuses.count(AttendanceStatus.WORK_FROM_HOME),
                    total_hours=sum((r.total_hours or Decimal("0") for r in user_rows), Decimal("0")),
                )
            )
        return sorted(summaries, key=lambda s: (s.full_name, s.user_id))

    def stats(
        self,
        actor: Actor,
        *,
        user_id: Optional[int] = None,
        dept_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> AttendanceStats:
        if start_date is not None and end_date is not None:
            require_date_range(start_date, end_date)
        scope = stats_scope(
            actor,
            user_id=user_id,
            dept_id=dept_id,
            gate="view-team-attendance",
            load_user=self._user,
            action="view-attendance",
        )
        rows = self._attendance.get_report_rows(start_date=start_date, end_date=end_date, **scope)

        statuses = [r.status for r in rows]
        total_days = len(rows)
        absent = statuses.count(AttendanceStatus.ABSENT)
        total_hours = sum((r.total_hours or Decimal("0") for r in rows), Decimal("0"))
        average = Decimal("0")
        rate = Decimal("0")
        if total_days:
            average = (total_hours / total_days).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
            rate = (Decimal(100) * (total_days - absent) / total_days).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        return AttendanceStats(
            total_days=total_days,
            present_days=statuses.count(AttendanceStatus.PRESENT),
            absent_days=absent,
            late_days=statuses.count(AttendanceStatus.LATE),
            half_days=statuses.count(AttendanceStatus.HALF_DAY),
            remote_days=statuses.count(AttendanceStatus.WORK_FROM_HOME),
            total_hours=total_hours,
            average_hours=average,
            attendance_rate=rate,
        )
