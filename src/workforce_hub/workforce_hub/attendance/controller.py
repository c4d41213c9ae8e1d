from __future__ import annotations

from flask import Flask, request

from ..common.http import (
    current_actor,
    date_or_none,
    datetime_or_none,
    int_or_none,
    json_body,
    login_required,
    ok,
    require_date,
)
from ..common.validators import require_enum
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def actor():
        return current_actor(container.users_repo)

    @app.route("/api/attendance/clock-in", methods=["POST"], endpoint="clock_in")
    @login_required
    def clock_in():
        data = request.get_json(silent=True) or {}
        attendance_id = container.attendance_service.clock_in(
            actor(),
            remote=bool(data.get("remote")),
            location=data.get("location"),
        )
        return ok({"attendance_id": attendance_id}, 201)

    @app.route("/api/attendance/clock-out", methods=["POST"], endpoint="clock_out")
    @login_required
    def clock_out():
        data = request.get_json(silent=True) or {}
        record = container.attendance_service.clock_out(actor(), break_minutes=int_or_none(data.get("break_minutes")) or 0)
        return ok(record)

    @app.route("/api/attendance/today", endpoint="attendance_today")
    @login_required
    def attendance_today():
        return ok(container.attendance_service.today(actor()))

    @app.route("/api/attendance", endpoint="attendance_history")
    @login_required
    def attendance_history():
        records = container.attendance_service.history(
            actor(),
            user_id=int_or_none(request.args.get("user_id")),
            limit=int_or_none(request.args.get("limit")) or DEFAULT_HISTORY_LIMIT,
        )
        return ok(records)

    @app.route("/api/attendance/report", endpoint="attendance_report")
    @login_required
    def attendance_report():
        start = require_date(request.args.get("start"), "Start")
        end = require_date(request.args.get("end"), "End")
        dept_id = int_or_none(request.args.get("dept_id"))
        svc = container.attendance_service
        return ok(
            {
                "summary": svc.department_report(actor(), start_date=start, end_date=end, dept_id=dept_id),
                "rows": svc.report_rows(actor(), start_date=start, end_date=end, dept_id=dept_id),
            }
        )

    @app.route("/api/attendance/stats", endpoint="attendance_stats")
    @login_required
    def attendance_stats():
        stats = container.attendance_service.stats(
            actor(),
            user_id=int_or_none(request.args.get("user_id")),
            dept_id=int_or_none(request.args.get("dept_id")),
            start_date=date_or_none(request.args.get("start"), "Start"),
            end_date=date_or_none(request.args.get("end"), "End"),
        )
        return ok(stats)

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="update_attendance")
    @login_required
    def update_attendance(attendance_id: int):
        data = json_body()
        status = data.get("status")
        record = container.attendance_service.update_record(
            actor(),
            attendance_id=attendance_id,
            clock_in=datetime_or_none(data.get("clock_in"), "Clock in"),
            clock_out=datetime_or_none(data.get("clock_out"), "Clock out"),
            break_minutes=int_or_none(data.get("break_minutes")),
            status=require_enum(AttendanceStatus, status, "Status") if status else None,
            notes=data.get("notes"),
        )
        return ok(record)
