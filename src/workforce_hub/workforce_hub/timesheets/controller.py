from __future__ import annotations

from flask import Flask, request

from ..common.http import current_actor, date_or_none, int_or_none, json_body, login_required, ok, require_datetime
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def actor():
        return current_actor(container.users_repo)

    @app.route("/api/time-entries", endpoint="list_time_entries")
    @login_required
    def list_time_entries():
        kwargs = dict(
            user_id=int_or_none(request.args.get("user_id")),
            start=date_or_none(request.args.get("start"), "Start"),
            end=date_or_none(request.args.get("end"), "End"),
        )
        entries = container.timesheet_service.list_entries(actor(), **kwargs)
        total = sum(e.duration_minutes or 0 for e in entries)
        return ok({"entries": entries, "total_minutes": total})

    @app.route("/api/time-entries/start", methods=["POST"], endpoint="start_timer")
    @login_required
    def start_timer():
        data = request.get_json(silent=True) or {}
        entry_id = container.timesheet_service.start_timer(
            actor(),
            task_id=int_or_none(data.get("task_id")),
            project_id=int_or_none(data.get("project_id")),
            description=data.get("description"),
            is_billable=bool(data.get("is_billable")),
        )
        return ok({"entry_id": entry_id}, 201)

    @app.route("/api/time-entries/stop", methods=["POST"], endpoint="stop_timer")
    @login_required
    def stop_timer():
        return ok(container.timesheet_service.stop_timer(actor()))

    @app.route("/api/time-entries", methods=["POST"], endpoint="add_time_entry")
    @login_required
    def add_time_entry():
        data = json_body()
        entry_id = container.timesheet_service.add_entry(
            actor(),
            start_time=require_datetime(data.get("start_time"), "Start time"),
            end_time=require_datetime(data.get("end_time"), "End time"),
            task_id=int_or_none(data.get("task_id")),
            project_id=int_or_none(data.get("project_id")),
            description=data.get("description"),
            is_billable=bool(data.get("is_billable")),
        )
        return ok({"entry_id": entry_id}, 201)

    @app.route("/api/time-entries/<int:entry_id>", methods=["DELETE"], endpoint="delete_time_entry")
    @login_required
    def delete_time_entry(entry_id: int):
        container.timesheet_service.delete_entry(actor(), entry_id=entry_id)
        return ok()
