from __future__ import annotations

from flask import Flask, request

from ..common.http import current_actor, date_or_none, int_or_none, json_body, login_required, ok
from ..common.validators import require_enum
from ..core.enums import Priority, TaskStatus
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def actor():
        return current_actor(container.users_repo)

    @app.route("/api/tasks", endpoint="list_tasks")
    @login_required
    def list_tasks():
        project_id = int_or_none(request.args.get("project_id"))
        if request.args.get("mine"):
            return ok(container.task_service.my_tasks(actor()))
        return ok(container.task_service.list_visible(actor(), project_id=project_id))

    @app.route("/api/tasks/board", endpoint="task_board")
    @login_required
    def task_board():
        project_id = int_or_none(request.args.get("project_id"))
        return ok(container.task_service.board(actor(), project_id=project_id))

    @app.route("/api/tasks/stats", endpoint="task_stats")
    @login_required
    def task_stats():
        project_id = int_or_none(request.args.get("project_id"))
        return ok(container.task_service.stats(actor(), project_id=project_id))

    @app.route("/api/tasks", methods=["POST"], endpoint="create_task")
    @login_required
    def create_task():
        data = json_body()
        task_id = container.task_service.create_task(
            actor(),
            project_id=int_or_none(data.get("project_id")) or 0,
            title=data.get("title", ""),
            description=data.get("description"),
            assignee_id=int_or_none(data.get("assignee_id")),
            priority=require_enum(Priority, data.get("priority", Priority.MEDIUM.value), "Priority"),
            due_date=date_or_none(data.get("due_date"), "Due date"),
            estimated_hours=data.get("estimated_hours"),
        )
        return ok({"task_id": task_id}, 201)

    @app.route("/api/tasks/<int:task_id>", methods=["PUT"], endpoint="update_task")
    @login_required
    def update_task(task_id: int):
        data = json_body()
        priority = data.get("priority")
        task = container.task_service.update_task(
            actor(),
            task_id=task_id,
            title=data.get("title"),
            description=data.get("description"),
            priority=require_enum(Priority, priority, "Priority") if priority else None,
            due_date=date_or_none(data.get("due_date"), "Due date"),
            estimated_hours=data.get("estimated_hours"),
        )
        return ok(task)

    @app.route("/api/tasks/<int:task_id>/status", methods=["PATCH"], endpoint="move_task")
    @login_required
    def move_task(task_id: int):
        data = json_body()
        container.task_service.move_task(
            actor(), task_id=task_id, status=require_enum(TaskStatus, data.get("status"), "Status")
        )
        return ok()

    @app.route("/api/tasks/<int:task_id>/assignee", methods=["PATCH"], endpoint="assign_task")
    @login_required
    def assign_task(task_id: int):
        data = json_body()
        container.task_service.assign_task(actor(), task_id=task_id, assignee_id=int_or_none(data.get("assignee_id")))
        return ok()

    @app.route("/api/tasks/<int:task_id>/hours", methods=["PATCH"], endpoint="log_task_hours")
    @login_required
    def log_task_hours(task_id: int):
        data = json_body()
        container.task_service.log_hours(actor(), task_id=task_id, actual_hours=data.get("actual_hours"))
        return ok()

    @app.route("/api/tasks/<int:task_id>", methods=["DELETE"], endpoint="delete_task")
    @login_required
    def delete_task(task_id: int):
        container.task_service.delete_task(actor(), task_id=task_id)
        return ok()
