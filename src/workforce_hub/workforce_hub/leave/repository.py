from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import ApprovalStatus, LeaveType
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def create(
        self,
        *,
        user_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        days_requested: int,
        reason: Optional[str],
    ) -> int:
        raise NotImplementedError

    def find_overlapping(
        self,
        user_id: int,
        *,
        start_date: date,
        end_date: date,
        statuses: Iterable[ApprovalStatus],
        exclude_id: Optional[int] = None,
    ) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def update(
        self,
        request_id: int,
        *,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        days_requested: int,
        reason: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        user_id: Optional[int] = None,
        dept_id: Optional[int] = None,
        status: Optional[ApprovalStatus] = None,
        year: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def set_status(
        self,
        request_id: int,
        *,
        status: ApprovalStatus,
        decided_by: Optional[int] = None,
        decided_at: Optional[datetime] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError
