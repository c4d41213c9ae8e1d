from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from ..core.enums import AttendanceStatus
from .model import WorkdayPolicy
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy
from .strategies.remote_strategy import RemoteStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_clock_in(self, *, now: datetime, today: date, policy: WorkdayPolicy, remote: bool = False) -> AttendanceStrategy:
        if remote:
            return RemoteStrategy()

        day_start = datetime.combine(today, policy.start)
        if now <= day_start + timedelta(minutes=policy.grace_minutes):
            return PresentStrategy()
        return LateStrategy()

    def for_clock_out(self, *, current_status: AttendanceStatus) -> AttendanceStrategy:
        if current_status == AttendanceStatus.WORK_FROM_HOME:
            return RemoteStrategy()
        if current_status == AttendanceStatus.LATE:
            return LateStrategy()
        return PresentStrategy()
