from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Optional

from ..core.constants import DEFAULT_CURRENCY
from ..core.enums import ExpenseCategory, ExpenseStatus


@dataclass(frozen=True)
class Expense:
    expense_id: int
    user_id: int
    category: ExpenseCategory
    amount: Decimal
    description: str
    expense_date: date
    status: ExpenseStatus
    currency: str = DEFAULT_CURRENCY
    project_id: Optional[int] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    @property
    def is_editable(self) -> bool:
        return self.status in (ExpenseStatus.DRAFT, ExpenseStatus.SUBMITTED)


@dataclass(frozen=True)
class ExpenseStats:
    total_count: int
    total_amount: Decimal
    submitted: int
    approved: int
    rejected: int
    reimbursed: int
    average_amount: Decimal
    by_category: Dict[str, Dict[str, object]] = field(default_factory=dict)
