from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ..model import WorkdayPolicy


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide_clock_in(self, *, now: datetime, today: date, policy: WorkdayPolicy) -> StatusDecision:
        raise NotImplementedError

    def decide_clock_out(
        self,
        *,
        worked_minutes: int,
        policy: WorkdayPolicy,
        current: AttendanceStatus,
    ) -> StatusDecision:
        if worked_minutes < policy.half_day_minutes:
            return StatusDecision(status=AttendanceStatus.HALF_DAY, note=f"Worked {worked_minutes} minutes")
        return StatusDecision(status=current)
