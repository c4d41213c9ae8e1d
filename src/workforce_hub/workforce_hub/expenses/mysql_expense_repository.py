from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.constants import DEFAULT_CURRENCY
from ..core.enums import ExpenseCategory, ExpenseStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone, optional_int
from .model import Expense
from .repository import ExpenseRepository

_COLUMNS = (
    "e.expense_id, e.user_id, e.category, e.amount, e.currency, e.description, e.expense_date, "
    "e.project_id, e.status, e.approved_by, e.approved_at, e.rejection_reason"
)


def _to_expense(r: dict) -> Expense:
    return Expense(
        expense_id=int(r["expense_id"]),
        user_id=int(r["user_id"]),
        category=ExpenseCategory(r["category"]),
        amount=Decimal(str(r["amount"])),
        currency=r.get("currency") or DEFAULT_CURRENCY,
        description=r["description"],
        expense_date=r["expense_date"],
        project_id=optional_int(r.get("project_id")),
        status=ExpenseStatus(r["status"]),
        approved_by=optional_int(r.get("approved_by")),
        approved_at=r.get("approved_at"),
        rejection_reason=r.get("rejection_reason"),
    )


class MySQLExpenseRepository(ExpenseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, expense_id: int) -> Optional[Expense]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM expenses e WHERE e.expense_id=%s", (expense_id,))
            r = fetchone(cur)
            return _to_expense(r) if r else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO expenses(user_id, category, amount, currency, description, expense_date, project_id, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s,'DRAFT')
                """,
                (user_id, category.value, amount, currency, description, expense_date, project_id),
            )
            return int(cur.lastrowid)

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE expenses
                SET category=%s, amount=%s, description=%s, expense_date=%s, project_id=%s
                WHERE expense_id=%s
                """,
                (category.value, amount, description, expense_date, project_id, int(expense_id)),
            )
            return cur.rowcount > 0

    def set_status(
        self,
        expense_id: int,
        *,
        status: ExpenseStatus,
        decided_by: Optional[int] = None,
        decided_at: Optional[datetime] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if decided_by is None:
                cur.execute("UPDATE expenses SET status=%s WHERE expense_id=%s", (status.value, int(expense_id)))
            else:
                cur.execute(
                    """
                    UPDATE expenses
                    SET status=%s, approved_by=%s, approved_at=%s, rejection_reason=%s
                    WHERE expense_id=%s
                    """,
                    (status.value, decided_by, decided_at, rejection_reason, int(expense_id)),
                )
            return cur.rowcount > 0

    def delete_by_id(self, expense_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM expenses WHERE expense_id=%s", (int(expense_id),))
            return cur.rowcount > 0

    def list_expenses(
        self,
        *,
        user_id: Optional[int] = None,
        dept_id: Optional[int] = None,
        status: Optional[ExpenseStatus] = None,
        year: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[Expense]:
        where, params = build_where(
            [
                ("e.user_id=%s", user_id),
                ("u.dept_id=%s", dept_id),
                ("e.status=%s", status.value if status else None),
                ("YEAR(e.expense_date)=%s", year),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM expenses e
                JOIN users u ON u.user_id = e.user_id
                {where}
                ORDER BY e.expense_date DESC, e.expense_id DESC
                LIMIT %s
                """,
                (*params, int(limit)),
            )
            return [_to_expense(r) for r in fetchall(cur)]
