from __future__ import annotations

from datetime import date, datetime

from ...core.enums import AttendanceStatus
from ..model import WorkdayPolicy
from .base import AttendanceStrategy, StatusDecision


class RemoteStrategy(AttendanceStrategy):
    """Work from home: no lateness tracking, short days still count as half days."""

    def decide_clock_in(self, *, now: datetime, today: date, policy: WorkdayPolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.WORK_FROM_HOME)
