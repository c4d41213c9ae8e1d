from __future__ import annotations

from flask import Flask, request

from ..common.http import current_actor, date_or_none, int_or_none, json_body, login_required, ok
from ..common.validators import require_enum
from ..core.enums import Priority, ProjectStatus
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def actor():
        return current_actor(container.users_repo)

    @app.route("/api/projects", endpoint="list_projects")
    @login_required
    def list_projects():
        status = request.args.get("status")
        status_filter = require_enum(ProjectStatus, status, "Status") if status else None
        return ok(container.project_service.list_visible(actor(), status=status_filter))

    @app.route("/api/projects/stats", endpoint="project_stats")
    @login_required
    def project_stats():
        return ok(container.project_service.stats(actor(), dept_id=int_or_none(request.args.get("dept_id"))))

    @app.route("/api/projects/<int:project_id>", endpoint="get_project")
    @login_required
    def get_project(project_id: int):
        return ok(container.project_service.get_project(actor(), project_id))

    @app.route("/api/projects", methods=["POST"], endpoint="create_project")
    @login_required
    def create_project():
        data = json_body()
        project_id = container.project_service.create_project(
            actor(),
            name=data.get("name", ""),
            dept_id=int_or_none(data.get("dept_id")) or 0,
            manager_id=int_or_none(data.get("manager_id")),
            description=data.get("description"),
            priority=require_enum(Priority, data.get("priority", Priority.MEDIUM.value), "Priority"),
            start_date=date_or_none(data.get("start_date"), "Start date"),
            end_date=date_or_none(data.get("end_date"), "End date"),
            budget=data.get("budget"),
        )
        return ok({"project_id": project_id}, 201)

    @app.route("/api/projects/<int:project_id>", methods=["PUT"], endpoint="update_project")
    @login_required
    def update_project(project_id: int):
        data = json_body()
        container.project_service.update_project(
            actor(),
            project_id=project_id,
            name=data.get("name", ""),
            description=data.get("description"),
            priority=require_enum(Priority, data.get("priority", Priority.MEDIUM.value), "Priority"),
            start_date=date_or_none(data.get("start_date"), "Start date"),
            end_date=date_or_none(data.get("end_date"), "End date"),
            budget=data.get("budget"),
        )
        return ok()

    @app.route("/api/projects/<int:project_id>/status", methods=["PATCH"], endpoint="change_project_status")
    @login_required
    def change_project_status(project_id: int):
        data = json_body()
        container.project_service.change_status(
            actor(), project_id=project_id, status=require_enum(ProjectStatus, data.get("status"), "Status")
        )
        return ok()

    @app.route("/api/projects/<int:project_id>", methods=["DELETE"], endpoint="delete_project")
    @login_required
    def delete_project(project_id: int):
        container.project_service.delete_project(actor(), project_id=project_id)
        return ok()
