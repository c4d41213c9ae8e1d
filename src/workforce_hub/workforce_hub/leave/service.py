from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from ..access.actors import is_org_wide, record_for_user, record_owned_by
from ..access.evaluator import authorize_record
from ..access.guard import ensure, ensure_action, stats_scope
from ..access.model import Actor, RecordAction
from ..common.datetime_utils import inclusive_days, now_local
from ..common.validators import optional_text, require_date_range, require_non_empty
from ..core.constants import LEAVE_ALLOWANCES, STATS_LIMIT
from ..core.enums import ApprovalStatus, LeaveType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from .model import BalanceLine, LeaveRequest, LeaveStats
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

# Which yearly allowance a leave type draws from.
ALLOWANCE_BUCKET: Dict[LeaveType, str] = {
    LeaveType.ANNUAL: "annual",
    LeaveType.SICK: "sick",
    LeaveType.MATERNITY: "personal",
    LeaveType.PATERNITY: "personal",
    LeaveType.BEREAVEMENT: "personal",
    LeaveType.UNPAID: "personal",
    LeaveType.STUDY: "study",
}

_BLOCKING = (ApprovalStatus.PENDING, ApprovalStatus.APPROVED)


class LeaveService:
    """Leave requests: submit, cancel, decide, and yearly balances."""

    def __init__(self, leave: LeaveRepository, users: UserRepository):
        self._leave = leave
        self._users = users

    def _get(self, request_id: int) -> LeaveRequest:
        req = self._leave.get_by_id(int(request_id))
        if not req:
            raise NotFoundError("Leave request not found")
        return req

    def _owner(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def create_request(
        self,
        actor: Actor,
        *,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: Optional[str] = None,
    ) -> int:
        require_date_range(start_date, end_date)
        clash = self._leave.find_overlapping(
            actor.user_id, start_date=start_date, end_date=end_date, statuses=_BLOCKING
        )
        if clash:
            raise ValidationError("You already have a leave request overlapping these dates")

        request_id = self._leave.create(
            user_id=actor.user_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            days_requested=inclusive_days(start_date, end_date),
            reason=optional_text(reason, "Reason"),
        )
        logger.info("leave requested request_id=%s user_id=%s type=%s", request_id, actor.user_id, leave_type.value)
        return request_id

    def update_request(
        self,
        actor: Actor,
        *,
        request_id: int,
        leave_type: Optional[LeaveType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        reason: Optional[str] = None,
    ) -> LeaveRequest:
        """Edit a request while it is still pending; omitted fields keep their value."""
        req = self._get(request_id)
        ensure(authorize_record(actor, record_owned_by(self._owner(req.user_id))), actor=actor, action="edit-leave")
        if not req.is_pending:
            raise ValidationError("Only pending requests can be edited")

        start = start_date or req.start_date
        end = end_date or req.end_date
        require_date_range(start, end)
        clash = self._leave.find_overlapping(
            req.user_id, start_date=start, end_date=end, statuses=_BLOCKING, exclude_id=req.request_id
        )
        if clash:
            raise ValidationError("Another leave request already overlaps these dates")

        ok = self._leave.update(
            req.request_id,
            leave_type=leave_type or req.leave_type,
            start_date=start,
            end_date=end,
            days_requested=inclusive_days(start, end),
            reason=optional_text(reason, "Reason") if reason is not None else req.reason,
        )
        if not ok:
            raise ValidationError("Failed to update leave request")
        logger.info("leave updated request_id=%s by=%s", req.request_id, actor.user_id)
        return self._get(req.request_id)

    def cancel_request(self, actor: Actor, *, request_id: int) -> None:
        req = self._get(request_id)
        if req.user_id != actor.user_id:
            raise AuthorizationError("Only the requester can cancel a leave request")
        if not req.is_pending:
            raise ValidationError("Only pending requests can be cancelled")
        if not self._leave.set_status(req.request_id, status=ApprovalStatus.CANCELLED):
            raise ValidationError("Failed to cancel leave request")

    def _decide(self, actor: Actor, req: LeaveRequest, action: str) -> None:
        ensure_action(actor, "approve-leave")
        owner = self._owner(req.user_id)
        ensure(authorize_record(actor, record_owned_by(owner), RecordAction.APPROVE), actor=actor, action=action)
        if not req.is_pending:
            raise ValidationError("Only pending requests can be decided")

    def approve(self, actor: Actor, *, request_id: int, now: Optional[datetime] = None) -> None:
        req = self._get(request_id)
        self._decide(actor, req, "approve-leave")
        ok = self._leave.set_status(
            req.request_id,
            status=ApprovalStatus.APPROVED,
            decided_by=actor.user_id,
            decided_at=now or now_local(),
        )
        if not ok:
            raise ValidationError("Failed to approve leave request")
        logger.info("leave approved request_id=%s by=%s", req.request_id, actor.user_id)

    def reject(self, actor: Actor, *, request_id: int, reason: str, now: Optional[datetime] = None) -> None:
        req = self._get(request_id)
        self._decide(actor, req, "reject-leave")
        ok = self._leave.set_status(
            req.request_id,
            status=ApprovalStatus.REJECTED,
            decided_by=actor.user_id,
            decided_at=now or now_local(),
            rejection_reason=require_non_empty(reason, "Rejection reason"),
        )
        if not ok:
            raise ValidationError("Failed to reject leave request")
        logger.info("leave rejected request_id=%s by=%s", req.request_id, actor.user_id)

    def list_requests(
        self,
        actor: Actor,
        *,
        user_id: Optional[int] = None,
        status: Optional[ApprovalStatus] = None,
    ) -> Sequence[LeaveRequest]:
        target = actor.user_id if user_id is None else int(user_id)
        if target != actor.user_id:
            ensure(authorize_record(actor, record_for_user(self._owner(target))), actor=actor, action="view-leave")
        return self._leave.list_requests(user_id=target, status=status)

    def pending_for(self, actor: Actor) -> List[LeaveRequest]:
        """Pending requests this approver may decide."""
        ensure_action(actor, "approve-leave")
        if is_org_wide(actor) or actor.role is Role.HR:
            candidates = self._leave.list_requests(status=ApprovalStatus.PENDING)
        else:
            candidates = self._leave.list_requests(status=ApprovalStatus.PENDING, dept_id=actor.department_id)

        owners: Dict[int, Optional[User]] = {}
        result = []
        for req in candidates:
            if req.user_id not in owners:
                owners[req.user_id] = self._users.get_by_id(req.user_id)
            record = record_owned_by(owners[req.user_id])
            if authorize_record(actor, record, RecordAction.APPROVE).allowed:
                result.append(req)
        return result

    def balance(self, actor: Actor, *, user_id: Optional[int] = None, year: Optional[int] = None) -> Dict[str, BalanceLine]:
        target = actor.user_id if user_id is None else int(user_id)
        if target != actor.user_id:
            ensure(authorize_record(actor, record_for_user(self._owner(target))), actor=actor, action="view-leave")
        year = year or now_local().year

        used = {bucket: 0 for bucket in LEAVE_ALLOWANCES}
        for req in self._leave.list_requests(user_id=target, status=ApprovalStatus.APPROVED, year=year):
            used[ALLOWANCE_BUCKET[req.leave_type]] += req.days_requested
        return {bucket: BalanceLine(total=total, used=used[bucket]) for bucket, total in LEAVE_ALLOWANCES.items()}

    def stats(
        self,
        actor: Actor,
        *,
        user_id: Optional[int] = None,
        dept_id: Optional[int] = None,
        year: Optional[int] = None,
    ) -> LeaveStats:
        scope = stats_scope(
            actor, user_id=user_id, dept_id=dept_id, gate="approve-leave", load_user=self._owner, action="view-leave"
        )
        requests = self._leave.list_requests(year=year or now_local().year, limit=STATS_LIMIT, **scope)

        by_type = {t.value: 0 for t in LeaveType}
        for req in requests:
            by_type[req.leave_type.value] += 1
        statuses = [r.status for r in requests]
        return LeaveStats(
            total_requests=len(requests),
            pending=statuses.count(ApprovalStatus.PENDING),
            approved=statuses.count(ApprovalStatus.APPROVED),
            rejected=statuses.count(ApprovalStatus.REJECTED),
            cancelled=statuses.count(ApprovalStatus.CANCELLED),
            approved_days=sum(r.days_requested for r in requests if r.status == ApprovalStatus.APPROVED),
            by_type=by_type,
        )
