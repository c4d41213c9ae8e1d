from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import ExpenseCategory, ExpenseStatus
from .model import Expense


class ExpenseRepository(Protocol):
    def get_by_id(self, expense_id: int) -> Optional[Expense]:
        raise NotImplementedError

    def create(
        self,
        *,
        user_id: int,
        category: ExpenseCategory,
        amount: Decimal,
        currency: str,
        description: str,
        expense_date: date,
        project_id: Optional[int],
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        expense_id: int,
        *,
        category: ExpenseCategory,
        amount: Decimal,
        description: str,
        expense_date: date,
        project_id: Optional[int],
    ) -> bool:
        raise NotImplementedError

    def set_status(
        self,
        expense_id: int,
        *,
        status: ExpenseStatus,
        decided_by: Optional[int] = None,
        decided_at: Optional[datetime] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def delete_by_id(self, expense_id: int) -> bool:
        raise NotImplementedError

    def list_expenses(
        self,
        *,
        user_id: Optional[int] = None,
        dept_id: Optional[int] = None,
        status: Optional[ExpenseStatus] = None,
        year: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[Expense]:
        raise NotImplementedError
