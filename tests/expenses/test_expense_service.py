from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from src.workforce_hub.workforce_hub.access.actors import actor_from_user
from src.workforce_hub.workforce_hub.core.enums import ExpenseCategory, ExpenseStatus, Role
from src.workforce_hub.workforce_hub.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.workforce_hub.workforce_hub.expenses.model import Expense
from src.workforce_hub.workforce_hub.expenses.service import ExpenseService
from src.workforce_hub.workforce_hub.projects.model import Project
from src.workforce_hub.workforce_hub.users.model import User

ENG, SALES = 1, 2

USERS = {
    1: User(1, "dev@example.com", "Dev", "x", Role.EMPLOYEE, ENG),
    2: User(2, "eng.admin@example.com", "Eng Admin", "x", Role.DEPT_ADMIN, ENG),
    3: User(3, "sales.admin@example.com", "Sales Admin", "x", Role.DEPT_ADMIN, SALES),
    4: User(4, "hr@example.com", "HR", "x", Role.HR, None),
    5: User(5, "peer@example.com", "Peer", "x", Role.EMPLOYEE, ENG),
}


class FakeUsersRepo:
    def get_by_id(self, user_id):
        return USERS.get(int(user_id))


class FakeProjectsRepo:
    def get_by_id(self, project_id):
        return Project(project_id=10, name="Platform", dept_id=ENG, manager_id=2) if int(project_id) == 10 else None


class FakeExpensesRepo:
    def __init__(self):
        self.expenses: dict[int, Expense] = {}

    def get_by_id(self, expense_id):
        return self.expenses.get(int(expense_id))

    def create(self, *, user_id, category, amount, currency, description, expense_date, project_id):
        eid = len(self.expenses) + 1
        self.expenses[eid] = Expense(
            expense_id=eid,
            user_id=user_id,
            category=category,
            amount=amount,
            description=description,
            expense_date=expense_date,
            status=ExpenseStatus.DRAFT,
            currency=currency,
            project_id=project_id,
        )
        return eid

    def update(self, expense_id, *, category, amount, description, expense_date, project_id):
        self.expenses[expense_id] = replace(
            self.expenses[expense_id],
            category=category,
            amount=amount,
            description=description,
            expense_date=expense_date,
            project_id=project_id,
        )
        return True

    def set_status(self, expense_id, *, status, decided_by=None, decided_at=None, rejection_reason=None):
        changes = dict(status=status)
        if decided_by is not None:
            changes.update(approved_by=decided_by, approved_at=decided_at, rejection_reason=rejection_reason)
        self.expenses[expense_id] = replace(self.expenses[expense_id], **changes)
        return True

    def delete_by_id(self, expense_id):
        return self.expenses.pop(expense_id, None) is not None

    def list_expenses(self, *, user_id=None, dept_id=None, status=None, year=None, limit=200):
        return [
            e
            for e in self.expenses.values()
            if (user_id is None or e.user_id == user_id)
            and (dept_id is None or USERS[e.user_id].dept_id == dept_id)
            and (status is None or e.status == status)
            and (year is None or e.expense_date.year == year)
        ][:limit]


@pytest.fixture
def repo():
    return FakeExpensesRepo()


@pytest.fixture
def service(repo):
    return ExpenseService(repo, FakeUsersRepo(), FakeProjectsRepo())


def _as(user_id):
    return actor_from_user(USERS[user_id])


def _draft(service, user_id=1, amount="42.50", category=ExpenseCategory.MEALS):
    return service.create_expense(
        _as(user_id),
        category=category,
        amount=amount,
        description="Team lunch",
        expense_date=date(2025, 4, 10),
    )


def test_create_starts_as_draft_with_default_currency(service, repo):
    eid = _draft(service)
    expense = repo.get_by_id(eid)
    assert expense.status == ExpenseStatus.DRAFT
    assert expense.amount == Decimal("42.50")
    assert expense.currency == "USD"


def test_create_validation(service):
    with pytest.raises(ValidationError):
        _draft(service, amount="0")
    with pytest.raises(ValidationError):
        _draft(service, amount="lots")
    with pytest.raises(ValidationError):
        service.create_expense(
            _as(1), category=ExpenseCategory.TRAVEL, amount="10", description="Taxi", expense_date=date(2025, 4, 1), project_id=99
        )


def test_only_owner_submits_drafts(service, repo):
    eid = _draft(service)
    with pytest.raises(AuthorizationError):
        service.submit(_as(5), expense_id=eid)
    service.submit(_as(1), expense_id=eid)
    assert repo.get_by_id(eid).status == ExpenseStatus.SUBMITTED
    with pytest.raises(ValidationError):
        service.submit(_as(1), expense_id=eid)


def test_owner_edits_until_decided(service, repo):
    eid = _draft(service)
    service.submit(_as(1), expense_id=eid)
    service.update_expense(
        _as(1), expense_id=eid, category=ExpenseCategory.TRAVEL, amount="60", description="Taxi", expense_date=date(2025, 4, 11)
    )
    assert repo.get_by_id(eid).amount == Decimal("60.00")

    with pytest.raises(AuthorizationError):
        service.delete_expense(_as(5), expense_id=eid)

    service.approve(_as(2), expense_id=eid)
    with pytest.raises(ValidationError):
        service.delete_expense(_as(1), expense_id=eid)


def test_approval_requires_submitted_and_scope(service, repo):
    eid = _draft(service)
    with pytest.raises(ValidationError):
        service.approve(_as(2), expense_id=eid)

    service.submit(_as(1), expense_id=eid)
    with pytest.raises(AuthorizationError):
        service.approve(_as(3), expense_id=eid)
    with pytest.raises(AuthorizationError):
        service.approve(_as(5), expense_id=eid)

    service.approve(_as(4), expense_id=eid)
    assert repo.get_by_id(eid).approved_by == 4


def test_nobody_approves_own_expense(service):
    eid = _draft(service, user_id=2)
    service.submit(_as(2), expense_id=eid)
    with pytest.raises(AuthorizationError):
        service.approve(_as(2), expense_id=eid)


def test_reject_requires_reason(service, repo):
    eid = _draft(service)
    service.submit(_as(1), expense_id=eid)
    with pytest.raises(ValidationError):
        service.reject(_as(2), expense_id=eid, reason="")
    service.reject(_as(2), expense_id=eid, reason="No receipt")
    assert repo.get_by_id(eid).status == ExpenseStatus.REJECTED


def test_reimburse_needs_payroll_role_and_approved_state(service, repo):
    eid = _draft(service)
    service.submit(_as(1), expense_id=eid)
    with pytest.raises(ValidationError):
        service.reimburse(_as(4), expense_id=eid)

    service.approve(_as(2), expense_id=eid)
    with pytest.raises(AuthorizationError):
        service.reimburse(_as(2), expense_id=eid)
    service.reimburse(_as(4), expense_id=eid)
    assert repo.get_by_id(eid).status == ExpenseStatus.REIMBURSED


def test_missing_expense(service):
    with pytest.raises(NotFoundError):
        service.submit(_as(1), expense_id=123)


def test_pending_queue_for_department_admin(service):
    mine = _draft(service)
    service.submit(_as(1), expense_id=mine)
    draft_only = _draft(service, user_id=5)

    assert [e.expense_id for e in service.pending_for(_as(2))] == [mine]
    assert service.pending_for(_as(3)) == []
    assert draft_only not in [e.expense_id for e in service.pending_for(_as(4))]


def test_stats_for_user_and_department(service):
    a = _draft(service, amount="10")
    _draft(service, amount="30", category=ExpenseCategory.TRAVEL)
    _draft(service, user_id=5, amount="20")
    service.submit(_as(1), expense_id=a)

    mine = service.stats(_as(1), year=2025)
    assert mine.total_count == 2
    assert mine.total_amount == Decimal("40.00")
    assert mine.average_amount == Decimal("20.00")
    assert mine.submitted == 1
    assert mine.by_category["TRAVEL"]["count"] == 1

    dept = service.stats(_as(2), dept_id=ENG, year=2025)
    assert dept.total_count == 3

    with pytest.raises(AuthorizationError):
        service.stats(_as(3), dept_id=ENG, year=2025)
    with pytest.raises(AuthorizationError):
        service.stats(_as(5), user_id=1, year=2025)
