from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Optional

from ..core.enums import ApprovalStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    user_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    days_requested: int
    reason: Optional[str]
    status: ApprovalStatus
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == ApprovalStatus.PENDING


@dataclass(frozen=True)
class BalanceLine:
    total: int
    used: int

    @property
    def remaining(self) -> int:
        return self.total - self.used

    def to_dict(self) -> dict:
        return {"total": self.total, "used": self.used, "remaining": self.remaining}


@dataclass(frozen=True)
class LeaveStats:
    total_requests: int
    pending: int
    approved: int
    rejected: int
    cancelled: int
    approved_days: int
    by_type: Dict[str, int] = field(default_factory=dict)
