from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date

import pytest
from werkzeug.security import generate_password_hash

from src.workforce_hub.workforce_hub.container import Container
from src.workforce_hub.workforce_hub.core.enums import ApprovalStatus, LeaveType, Role
from src.workforce_hub.workforce_hub.core.exceptions import UnknownRoleError
from src.workforce_hub.workforce_hub.leave.model import LeaveRequest
from src.workforce_hub.workforce_hub.leave.service import LeaveService
from src.workforce_hub.workforce_hub.main import create_app
from src.workforce_hub.workforce_hub.users.department_model import Department
from src.workforce_hub.workforce_hub.users.model import User
from src.workforce_hub.workforce_hub.users.service import AuthService, DepartmentService, UserService

PASSWORD = "secret123"
ENG = 1


def _user(user_id, email, role, dept_id):
    return User(user_id, email, email.split("@")[0].title(), generate_password_hash(PASSWORD), role, dept_id)


class InMemoryUsers:
    def __init__(self):
        self.users = {
            1: _user(1, "dev@example.com", Role.EMPLOYEE, ENG),
            2: _user(2, "admin@example.com", Role.DEPT_ADMIN, ENG),
            3: _user(3, "hr@example.com", Role.HR, None),
        }

    def get_by_id(self, user_id):
        return self.users.get(int(user_id))

    def get_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    def list_users(self, *, dept_id=None, limit=200):
        return [u for u in self.users.values() if dept_id is None or u.dept_id == dept_id][:limit]

    def set_active(self, user_id, *, is_active):
        self.users[user_id] = replace(self.users[user_id], is_active=is_active)
        return True

    def update_profile(self, user_id, *, full_name, position, phone):
        self.users[user_id] = replace(self.users[user_id], full_name=full_name, position=position, phone=phone)
        return True


class InMemoryDepartments:
    def list_all(self):
        return [Department(ENG, "Engineering")]

    def get_by_id(self, dept_id):
        return Department(ENG, "Engineering") if int(dept_id) == ENG else None


class InMemoryLeave:
    def __init__(self):
        self.requests = {
            7: LeaveRequest(
                request_id=7,
                user_id=2,
                leave_type=LeaveType.ANNUAL,
                start_date=date(2025, 6, 2),
                end_date=date(2025, 6, 3),
                days_requested=2,
                reason=None,
                status=ApprovalStatus.PENDING,
            )
        }

    def get_by_id(self, request_id):
        return self.requests.get(int(request_id))

    def find_overlapping(self, user_id, *, start_date, end_date, statuses, exclude_id=None):
        return None

    def update(self, request_id, *, leave_type, start_date, end_date, days_requested, reason):
        self.requests[request_id] = replace(
            self.requests[request_id],
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            days_requested=days_requested,
            reason=reason,
        )
        return True

    def set_status(self, request_id, *, status, decided_by=None, decided_at=None, rejection_reason=None):
        self.requests[request_id] = replace(self.requests[request_id], status=status, approved_by=decided_by)
        return True


@pytest.fixture
def users():
    return InMemoryUsers()


@pytest.fixture
def leave_repo():
    return InMemoryLeave()


def _container(users, leave_repo):
    # Only the services these endpoints reach are wired.
    return Container(
        users_repo=users,
        auth_service=AuthService(users),
        user_service=UserService(users, InMemoryDepartments()),
        department_service=DepartmentService(InMemoryDepartments(), users),
        project_service=None,
        task_service=None,
        timesheet_service=None,
        attendance_service=None,
        leave_service=LeaveService(leave_repo, users),
        expense_service=None,
    )


@pytest.fixture
def app(monkeypatch, users, leave_repo):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(_container(users, leave_repo))


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, email):
    resp = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert resp.status_code == 200
    return resp


def test_health(client):
    resp = client.get("/api/health")
    assert resp.get_json() == {"success": True, "data": {"status": "ok"}}


def test_requests_without_session_get_401(client):
    resp = client.get("/api/users")
    assert resp.status_code == 401
    body = resp.get_json()
    assert body["success"] is False
    assert body["error"]["code"] == "AUTHENTICATION_REQUIRED"
    assert body["error"]["path"] == "/api/users"


def test_bad_password_is_401(client):
    resp = client.post("/api/auth/login", json={"email": "dev@example.com", "password": "nope"})
    assert resp.status_code == 401


def test_me_reports_navigation_and_actions(client):
    _login(client, "hr@example.com")
    data = client.get("/api/auth/me").get_json()["data"]

    assert data["user"]["role"] == "HR"
    assert "payroll" in data["navigation"]
    assert "users" not in data["navigation"]
    assert "approve-leave" in data["actions"]
    assert "create-user" not in data["actions"]


def test_forbidden_action_returns_generic_403(client):
    _login(client, "dev@example.com")
    resp = client.post(
        "/api/users",
        json={"full_name": "Eve", "email": "eve@example.com", "password": "password1", "role": "EMPLOYEE", "dept_id": ENG},
    )
    assert resp.status_code == 403
    error = resp.get_json()["error"]
    assert error["code"] == "INSUFFICIENT_PERMISSIONS"
    assert "create-user" not in error["message"]


def test_self_approval_is_forbidden_over_http(client, leave_repo):
    _login(client, "admin@example.com")
    assert client.post("/api/leave/7/approve").status_code == 403

    client.post("/api/auth/logout")
    _login(client, "hr@example.com")
    assert client.post("/api/leave/7/approve").status_code == 200
    assert leave_repo.get_by_id(7).status == ApprovalStatus.APPROVED


def test_validation_errors_are_400(client):
    _login(client, "admin@example.com")
    resp = client.patch("/api/users/1/role", json={"role": "WIZARD"})
    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "VALIDATION_ERROR"


def test_deactivated_user_loses_session(client, users):
    _login(client, "dev@example.com")
    users.set_active(1, is_active=False)
    assert client.get("/api/auth/me").status_code == 401


def test_configuration_errors_are_500(monkeypatch, users, leave_repo):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(_container(users, leave_repo))

    @app.route("/api/broken")
    def broken():
        raise UnknownRoleError("JANITOR")

    resp = app.test_client().get("/api/broken")
    assert resp.status_code == 500
    assert resp.get_json()["error"] == {"code": "INTERNAL_ERROR", "message": "Internal server error", "path": "/api/broken"}


def test_unexpected_errors_are_logged_and_wrapped(monkeypatch, users, leave_repo, caplog):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(_container(users, leave_repo))

    @app.route("/api/crash")
    def crash():
        raise RuntimeError("db went away")

    with caplog.at_level(logging.ERROR):
        resp = app.test_client().get("/api/crash")

    assert resp.status_code == 500
    assert resp.get_json() == {
        "success": False,
        "error": {"code": "INTERNAL_ERROR", "message": "Internal server error", "path": "/api/crash"},
    }
    assert "db went away" not in resp.get_data(as_text=True)
    record = next(r for r in caplog.records if "unhandled error" in r.getMessage())
    assert record.exc_info is not None


@pytest.mark.parametrize(
    "method, path, status, code",
    [
        ("get", "/api/no-such-thing", 404, "NOT_FOUND"),
        ("delete", "/api/health", 405, "METHOD_NOT_ALLOWED"),
    ],
)
def test_routing_errors_keep_the_json_envelope(client, method, path, status, code):
    resp = getattr(client, method)(path)
    assert resp.status_code == status
    body = resp.get_json()
    assert body["success"] is False
    assert body["error"]["code"] == code
    assert body["error"]["path"] == path


def test_requester_edits_pending_leave(client, leave_repo):
    _login(client, "admin@example.com")
    resp = client.put("/api/leave/7", json={"end_date": "2025-06-04", "reason": "Long weekend"})

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["days_requested"] == 3
    assert data["end_date"] == "2025-06-04"
    assert leave_repo.get_by_id(7).reason == "Long weekend"


def test_leave_edit_rejects_bad_dates(client):
    _login(client, "admin@example.com")
    resp = client.put("/api/leave/7", json={"start_date": "2025-06-09"})
    assert resp.status_code == 400


def test_profile_edit_over_http(client):
    _login(client, "dev@example.com")
    resp = client.put("/api/users/1", json={"phone": " 555-0101 "})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["phone"] == "555-0101"

    assert client.put("/api/users/2", json={"phone": "555-0102"}).status_code == 403


def test_user_stats_over_http(client):
    _login(client, "admin@example.com")
    data = client.get("/api/users/stats").get_json()["data"]
    assert data["total_users"] == 2
    assert data["by_department"] == [{"dept_id": ENG, "dept_name": "Engineering", "count": 2}]

    client.post("/api/auth/logout")
    _login(client, "dev@example.com")
    assert client.get("/api/users/stats").status_code == 403
