from __future__ import annotations

from flask import Flask, request

from ..common.http import current_actor, date_or_none, int_or_none, json_body, login_required, ok, require_date
from ..common.validators import require_enum
from ..core.enums import ApprovalStatus, LeaveType
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def actor():
        return current_actor(container.users_repo)

    @app.route("/api/leave", endpoint="list_leave")
    @login_required
    def list_leave():
        status = request.args.get("status")
        requests = container.leave_service.list_requests(
            actor(),
            user_id=int_or_none(request.args.get("user_id")),
            status=require_enum(ApprovalStatus, status, "Status") if status else None,
        )
        return ok(requests)

    @app.route("/api/leave", methods=["POST"], endpoint="create_leave")
    @login_required
    def create_leave():
        data = json_body()
        request_id = container.leave_service.create_request(
            actor(),
            leave_type=require_enum(LeaveType, data.get("leave_type"), "Leave type"),
            start_date=require_date(data.get("start_date"), "Start date"),
            end_date=require_date(data.get("end_date"), "End date"),
            reason=data.get("reason"),
        )
        return ok({"request_id": request_id}, 201)

    @app.route("/api/leave/<int:request_id>", methods=["PUT"], endpoint="update_leave")
    @login_required
    def update_leave(request_id: int):
        data = json_body()
        leave_type = data.get("leave_type")
        updated = container.leave_service.update_request(
            actor(),
            request_id=request_id,
            leave_type=require_enum(LeaveType, leave_type, "Leave type") if leave_type else None,
            start_date=date_or_none(data.get("start_date"), "Start date"),
            end_date=date_or_none(data.get("end_date"), "End date"),
            reason=data.get("reason"),
        )
        return ok(updated)

    @app.route("/api/leave/pending", endpoint="pending_leave")
    @login_required
    def pending_leave():
        return ok(container.leave_service.pending_for(actor()))

    @app.route("/api/leave/balance", endpoint="leave_balance")
    @login_required
    def leave_balance():
        balance = container.leave_service.balance(
            actor(),
            user_id=int_or_none(request.args.get("user_id")),
            year=int_or_none(request.args.get("year")),
        )
        return ok({bucket: line.to_dict() for bucket, line in balance.items()})

    @app.route("/api/leave/stats", endpoint="leave_stats")
    @login_required
    def leave_stats():
        stats = container.leave_service.stats(
            actor(),
            user_id=int_or_none(request.args.get("user_id")),
            dept_id=int_or_none(request.args.get("dept_id")),
            year=int_or_none(request.args.get("year")),
        )
        return ok(stats)

    @app.route("/api/leave/<int:request_id>/cancel", methods=["POST"], endpoint="cancel_leave")
    @login_required
    def cancel_leave(request_id: int):
        container.leave_service.cancel_request(actor(), request_id=request_id)
        return ok()

    @app.route("/api/leave/<int:request_id>/approve", methods=["POST"], endpoint="approve_leave")
    @login_required
    def approve_leave(request_id: int):
        container.leave_service.approve(actor(), request_id=request_id)
        return ok()

    @app.route("/api/leave/<int:request_id>/reject", methods=["POST"], endpoint="reject_leave")
    @login_required
    def reject_leave(request_id: int):
        data = request.get_json(silent=True) or {}
        container.leave_service.reject(actor(), request_id=request_id, reason=data.get("reason", ""))
        return ok()
