from __future__ import annotations

from datetime import date, datetime

from ...core.enums import AttendanceStatus
from ..model import WorkdayPolicy
from .base import AttendanceStrategy, StatusDecision


class PresentStrategy(AttendanceStrategy):
    """On-time clock-in."""

    def decide_clock_in(self, *, now: datetime, today: date, policy: WorkdayPolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
