from __future__ import annotations

from flask import Flask, request

from ..common.http import current_actor, int_or_none, json_body, login_required, ok, require_date
from ..common.validators import require_enum
from ..core.enums import ExpenseCategory, ExpenseStatus
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def actor():
        return current_actor(container.users_repo)

    def expense_fields(data: dict) -> dict:
        return dict(
            category=require_enum(ExpenseCategory, data.get("category"), "Category"),
            amount=data.get("amount"),
            description=data.get("description", ""),
            expense_date=require_date(data.get("expense_date"), "Expense date"),
            project_id=int_or_none(data.get("project_id")),
        )

    @app.route("/api/expenses", endpoint="list_expenses")
    @login_required
    def list_expenses():
        status = request.args.get("status")
        expenses = container.expense_service.list_expenses(
            actor(),
            user_id=int_or_none(request.args.get("user_id")),
            status=require_enum(ExpenseStatus, status, "Status") if status else None,
        )
        return ok(expenses)

    @app.route("/api/expenses", methods=["POST"], endpoint="create_expense")
    @login_required
    def create_expense():
        data = json_body()
        expense_id = container.expense_service.create_expense(
            actor(), currency=data.get("currency"), **expense_fields(data)
        )
        return ok({"expense_id": expense_id}, 201)

    @app.route("/api/expenses/<int:expense_id>", methods=["PUT"], endpoint="update_expense")
    @login_required
    def update_expense(expense_id: int):
        data = json_body()
        container.expense_service.update_expense(actor(), expense_id=expense_id, **expense_fields(data))
        return ok()

    @app.route("/api/expenses/<int:expense_id>", methods=["DELETE"], endpoint="delete_expense")
    @login_required
    def delete_expense(expense_id: int):
        container.expense_service.delete_expense(actor(), expense_id=expense_id)
        return ok()

    @app.route("/api/expenses/<int:expense_id>/submit", methods=["POST"], endpoint="submit_expense")
    @login_required
    def submit_expense(expense_id: int):
        container.expense_service.submit(actor(), expense_id=expense_id)
        return ok()

    @app.route("/api/expenses/pending", endpoint="pending_expenses")
    @login_required
    def pending_expenses():
        return ok(container.expense_service.pending_for(actor()))

    @app.route("/api/expenses/<int:expense_id>/approve", methods=["POST"], endpoint="approve_expense")
    @login_required
    def approve_expense(expense_id: int):
        container.expense_service.approve(actor(), expense_id=expense_id)
        return ok()

    @app.route("/api/expenses/<int:expense_id>/reject", methods=["POST"], endpoint="reject_expense")
    @login_required
    def reject_expense(expense_id: int):
        data = request.get_json(silent=True) or {}
        container.expense_service.reject(actor(), expense_id=expense_id, reason=data.get("reason", ""))
        return ok()

    @app.route("/api/expenses/<int:expense_id>/reimburse", methods=["POST"], endpoint="reimburse_expense")
    @login_required
    def reimburse_expense(expense_id: int):
        container.expense_service.reimburse(actor(), expense_id=expense_id)
        return ok()

    @app.route("/api/expenses/stats", endpoint="expense_stats")
    @login_required
    def expense_stats():
        stats = container.expense_service.stats(
            actor(),
            user_id=int_or_none(request.args.get("user_id")),
            dept_id=int_or_none(request.args.get("dept_id")),
            year=int_or_none(request.args.get("year")),
        )
        return ok(stats)
