from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Sequence

from ..access.actors import is_org_wide, record_for_user, record_owned_by
from ..access.evaluator import authorize_record
from ..access.guard import NOT_PERMITTED, ensure, ensure_action, stats_scope
from ..access.model import Actor, RecordAction
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty, require_positive_amount
from ..core.constants import DEFAULT_CURRENCY, STATS_LIMIT
from ..core.enums import ExpenseCategory, ExpenseStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..projects.repository import ProjectRepository
from ..users.model import User
from ..users.repository import UserRepository
from .model import Expense, ExpenseStats
from .repository import ExpenseRepository

logger = logging.getLogger(__name__)


class ExpenseService:
    """Expense claims.

    Lifecycle: DRAFT -> SUBMITTED -> APPROVED -> REIMBURSED, or SUBMITTED ->
    REJECTED. The owner edits while DRAFT or SUBMITTED; approvers decide
    SUBMITTED claims; payroll reimburses APPROVED ones.
    """

    def __init__(self, expenses: ExpenseRepository, users: UserRepository, projects: Optional[ProjectRepository] = None):
        self._expenses = expenses
        self._users = users
        self._projects = projects

    def _get(self, expense_id: int) -> Expense:
        expense = self._expenses.get_by_id(int(expense_id))
        if not expense:
            raise NotFoundError("Expense not found")
        return expense

    def _owner(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def _check_project(self, project_id: Optional[int]) -> Optional[int]:
        if project_id is None or self._projects is None:
            return project_id
        if not self._projects.get_by_id(int(project_id)):
            raise ValidationError("Project does not exist")
        return int(project_id)

    def _ensure_owner_edit(self, actor: Actor, expense: Expense, action: str) -> None:
        ensure(authorize_record(actor, record_owned_by(self._owner(expense.user_id))), actor=actor, action=action)
        if not expense.is_editable:
            raise ValidationError("Approved, rejected or reimbursed expenses cannot be changed")

    def create_expense(
        self,
        actor: Actor,
        *,
        category: ExpenseCategory,
        amount,
        description: str,
        expense_date: date,
        project_id: Optional[int] = None,
        currency: Optional[str] = None,
    ) -> int:
        expense_id = self._expenses.create(
            user_id=actor.user_id,
            category=category,
            amount=require_positive_amount(amount),
            currency=(currency or DEFAULT_CURRENCY).strip().upper(),
            description=require_non_empty(description, "Description"),
            expense_date=expense_date,
            project_id=self._check_project(project_id),
        )
        logger.info("expense drafted expense_id=%s user_id=%s", expense_id, actor.user_id)
        return expense_id

    def submit(self, actor: Actor, *, expense_id: int) -> None:
        expense = self._get(expense_id)
        if expense.user_id != actor.user_id:
            raise AuthorizationError("Only the owner can submit an expense")
        if expense.status != ExpenseStatus.DRAFT:
            raise ValidationError("Only draft expenses can be submitted")
        if not self._expenses.set_status(expense.expense_id, status=ExpenseStatus.SUBMITTED):
            raise ValidationError("Failed to submit expense")

    def update_expense(
        self,
        actor: Actor,
        *,
        expense_id: int,
        category: ExpenseCategory,
        amount,
        description: str,
        expense_date: date,
        project_id: Optional[int] = None,
    ) -> None:
        expense = self._get(expense_id)
        self._ensure_owner_edit(actor, expense, "edit-expense")
        ok = self._expenses.update(
            expense.expense_id,
            category=category,
            amount=require_positive_amount(amount),
            description=require_non_empty(description, "Description"),
            expense_date=expense_date,
            project_id=self._check_project(project_id),
        )
        if not ok:
            raise ValidationError("Failed to update expense")

    def delete_expense(self, actor: Actor, *, expense_id: int) -> None:
        expense = self._get(expense_id)
        self._ensure_owner_edit(actor, expense, "delete-expense")
        if not self._expenses.delete_by_id(expense.expense_id):
            raise ValidationError("Failed to delete expense")

    def _decide(self, actor: Actor, expense: Expense, action: str) -> None:
        ensure_action(actor, "approve-expense")
        record = record_owned_by(self._owner(expense.user_id))
        ensure(authorize_record(actor, record, RecordAction.APPROVE), actor=actor, action=action)
        if expense.status != ExpenseStatus.SUBMITTED:
            raise ValidationError("Only submitted expenses can be decided")

    def approve(self, actor: Actor, *, expense_id: int, now: Optional[datetime] = None) -> None:
        expense = self._get(expense_id)
        self._decide(actor, expense, "approve-expense")
        ok = self._expenses.set_status(
            expense.expense_id,
            status=ExpenseStatus.APPROVED,
            decided_by=actor.user_id,
            decided_at=now or now_local(),
        )
        if not ok:
            raise ValidationError("Failed to approve expense")
        logger.info("expense approved expense_id=%s by=%s", expense.expense_id, actor.user_id)

    def reject(self, actor: Actor, *, expense_id: int, reason: str, now: Optional[datetime] = None) -> None:
        expense = self._get(expense_id)
        self._decide(actor, expense, "reject-expense")
        ok = self._expenses.set_status(
            expense.expense_id,
            status=ExpenseStatus.REJECTED,
            decided_by=actor.user_id,
            decided_at=now or now_local(),
            rejection_reason=require_non_empty(reason, "Rejection reason"),
        )
        if not ok:
            raise ValidationError("Failed to reject expense")

    def reimburse(self, actor: Actor, *, expense_id: int) -> None:
        ensure_action(actor, "process-payroll")
        expense = self._get(expense_id)
        if expense.user_id == actor.user_id:
            raise AuthorizationError(NOT_PERMITTED)
        if expense.status != ExpenseStatus.APPROVED:
            raise ValidationError("Only approved expenses can be reimbursed")
        if not self._expenses.set_status(expense.expense_id, status=ExpenseStatus.REIMBURSED):
            raise ValidationError("Failed to mark expense reimbursed")
        logger.info("expense reimbursed expense_id=%s by=%s", expense.expense_id, actor.user_id)

    def list_expenses(
        self,
        actor: Actor,
        *,
        user_id: Optional[int] = None,
        status: Optional[ExpenseStatus] = None,
    ) -> Sequence[Expense]:
        target = actor.user_id if user_id is None else int(user_id)
        if target != actor.user_id:
            ensure(authorize_record(actor, record_for_user(self._owner(target))), actor=actor, action="view-expenses")
        return self._expenses.list_expenses(user_id=target, status=status)

    def pending_for(self, actor: Actor) -> List[Expense]:
        """Submitted claims this approver may decide."""
        ensure_action(actor, "approve-expense")
        dept_id = None if is_org_wide(actor) or actor.role is Role.HR else actor.department_id
        candidates = self._expenses.list_expenses(status=ExpenseStatus.SUBMITTED, dept_id=dept_id)

        owners: Dict[int, Optional[User]] = {}
        result = []
        for expense in candidates:
            if expense.user_id not in owners:
                owners[expense.user_id] = self._users.get_by_id(expense.user_id)
            if authorize_record(actor, record_owned_by(owners[expense.user_id]), RecordAction.APPROVE).allowed:
                result.append(expense)
        return result

    def stats(
        self,
        actor: Actor,
        *,
        user_id: Optional[int] = None,
        dept_id: Optional[int] = None,
        year: Optional[int] = None,
    ) -> ExpenseStats:
        """Yearly totals for one user (default: the actor) or a department."""
        scope = stats_scope(
            actor, user_id=user_id, dept_id=dept_id, gate="approve-expense", load_user=self._owner, action="view-expenses"
        )
        expenses = self._expenses.list_expenses(year=year or now_local().year, limit=STATS_LIMIT, **scope)

        total = sum((e.amount for e in expenses), Decimal("0"))
        by_category: Dict[str, Dict[str, object]] = {c.value: {"count": 0, "amount": Decimal("0")} for c in ExpenseCategory}
        for e in expenses:
            bucket = by_category[e.category.value]
            bucket["count"] += 1
            bucket["amount"] += e.amount

        count = len(expenses)
        average = (total / count).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP) if count else Decimal("0.00")
        statuses = [e.status for e in expenses]
        return ExpenseStats(
            total_count=count,
            total_amount=total,
            submitted=statuses.count(ExpenseStatus.SUBMITTED),
            approved=statuses.count(ExpenseStatus.APPROVED),
            rejected=statuses.count(ExpenseStatus.REJECTED),
            reimbursed=statuses.count(ExpenseStatus.REIMBURSED),
            average_amount=average,
            by_category=by_category,
        )
