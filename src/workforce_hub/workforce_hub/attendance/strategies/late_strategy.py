from __future__ import annotations

from datetime import date, datetime

from ...core.enums import AttendanceStatus
from ..model import WorkdayPolicy
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Clock-in after start of day plus grace."""

    def decide_clock_in(self, *, now: datetime, today: date, policy: WorkdayPolicy) -> StatusDecision:
        late_minutes = int((now - datetime.combine(today, policy.start)).total_seconds() // 60)
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Late by {late_minutes} minutes")
