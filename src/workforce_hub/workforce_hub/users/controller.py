from __future__ import annotations

from datetime import timedelta

from flask import Flask, session

from ..access.catalog import allowed_actions, visible_navigation
from ..access.ranking import permission_level
from ..common.http import current_actor, int_or_none, json_body, login_required, ok
from ..common.validators import require_enum
from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.enums import Role
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def actor():
        return current_actor(container.users_repo)

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value
        session["dept_id"] = s_user.dept_id
        return ok(s_user)

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok()

    @app.route("/api/auth/me", endpoint="me")
    @login_required
    def me():
        a = actor()
        user = container.users_repo.get_by_id(a.user_id)
        return ok(
            {
                "user": user.to_public(),
                "permission_level": permission_level(a.role),
                "navigation": visible_navigation(a),
                "actions": allowed_actions(a),
            }
        )

    @app.route("/api/users", endpoint="list_users")
    @login_required
    def list_users():
        users = container.user_service.list_visible(actor())
        return ok([u.to_public() for u in users])

    @app.route("/api/users/stats", endpoint="user_stats")
    @login_required
    def user_stats():
        return ok(container.user_service.stats(actor()))

    @app.route("/api/users/<int:user_id>", endpoint="get_user")
    @login_required
    def get_user(user_id: int):
        return ok(container.user_service.get_user(actor(), user_id).to_public())

    @app.route("/api/users/<int:user_id>", methods=["PUT"], endpoint="update_user_profile")
    @login_required
    def update_user_profile(user_id: int):
        data = json_body()
        user = container.user_service.update_profile(
            actor(),
            user_id=user_id,
            full_name=data.get("full_name"),
            position=data.get("position"),
            phone=data.get("phone"),
        )
        return ok(user.to_public())

    @app.route("/api/users", methods=["POST"], endpoint="create_user")
    @login_required
    def create_user():
        data = json_body()
        user_id = container.user_service.create_user(
            actor(),
            full_name=data.get("full_name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            role=require_enum(Role, data.get("role", Role.EMPLOYEE.value), "Role"),
            dept_id=int_or_none(data.get("dept_id")),
            position=data.get("position"),
            phone=data.get("phone"),
            employee_code=data.get("employee_code"),
        )
        return ok({"user_id": user_id}, 201)

    @app.route("/api/users/<int:user_id>/role", methods=["PATCH"], endpoint="change_user_role")
    @login_required
    def change_user_role(user_id: int):
        data = json_body()
        container.user_service.change_role(actor(), user_id=user_id, role=require_enum(Role, data.get("role"), "Role"))
        return ok()

    @app.route("/api/users/<int:user_id>/department", methods=["PATCH"], endpoint="change_user_department")
    @login_required
    def change_user_department(user_id: int):
        data = json_body()
        container.user_service.change_department(actor(), user_id=user_id, dept_id=int_or_none(data.get("dept_id")))
        return ok()

    @app.route("/api/users/<int:user_id>/status", methods=["PATCH"], endpoint="set_user_status")
    @login_required
    def set_user_status(user_id: int):
        data = json_body()
        container.user_service.set_active(actor(), user_id=user_id, is_active=bool(data.get("is_active")))
        return ok()

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="delete_user")
    @login_required
    def delete_user(user_id: int):
        container.user_service.delete_user(actor(), user_id=user_id)
        return ok()

    @app.route("/api/departments", endpoint="list_departments")
    @login_required
    def list_departments():
        return ok(container.department_service.list_departments())

    @app.route("/api/departments", methods=["POST"], endpoint="create_department")
    @login_required
    def create_department():
        data = json_body()
        dept_id = container.department_service.create_department(
            actor(),
            dept_name=data.get("dept_name", ""),
            description=data.get("description"),
            manager_id=int_or_none(data.get("manager_id")),
        )
        return ok({"dept_id": dept_id}, 201)

    @app.route("/api/departments/<int:dept_id>", methods=["PUT"], endpoint="update_department")
    @login_required
    def update_department(dept_id: int):
        data = json_body()
        container.department_service.update_department(
            actor(),
            dept_id=dept_id,
            dept_name=data.get("dept_name", ""),
            description=data.get("description"),
            manager_id=int_or_none(data.get("manager_id")),
        )
        return ok()
