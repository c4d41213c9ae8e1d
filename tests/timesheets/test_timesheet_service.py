from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from src.workforce_hub.workforce_hub.access.actors import actor_from_user
from src.workforce_hub.workforce_hub.core.enums import Role
from src.workforce_hub.workforce_hub.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.workforce_hub.workforce_hub.tasks.model import Task
from src.workforce_hub.workforce_hub.timesheets.model import TimeEntry
from src.workforce_hub.workforce_hub.timesheets.service import TimesheetService, minutes_between
from src.workforce_hub.workforce_hub.users.model import User

USERS = {
    1: User(1, "dev@example.com", "Dev", "x", Role.EMPLOYEE, 1),
    2: User(2, "peer@example.com", "Peer", "x", Role.EMPLOYEE, 1),
    3: User(3, "admin@example.com", "Admin", "x", Role.DEPT_ADMIN, 1),
}


class FakeUsersRepo:
    def get_by_id(self, user_id):
        return USERS.get(int(user_id))


class FakeTasksRepo:
    def get_by_id(self, task_id):
        if int(task_id) == 7:
            return Task(task_id=7, title="API", project_id=42, reporter_id=3)
        return None


class FakeEntriesRepo:
    def __init__(self):
        self.entries: dict[int, TimeEntry] = {}

    def get_by_id(self, entry_id):
        return self.entries.get(int(entry_id))

    def get_running(self, user_id):
        return next((e for e in self.entries.values() if e.user_id == user_id and e.is_running), None)

    def create(self, *, user_id, start_time, end_time, duration_minutes, task_id, project_id, description, is_billable):
        eid = len(self.entries) + 1
        self.entries[eid] = TimeEntry(
            entry_id=eid,
            user_id=user_id,
            start_time=start_time,
            end_time=end_time,
            duration_minutes=duration_minutes,
            task_id=task_id,
            project_id=project_id,
            description=description,
            is_billable=is_billable,
        )
        return eid

    def stop(self, entry_id, *, end_time, duration_minutes):
        self.entries[entry_id] = replace(self.entries[entry_id], end_time=end_time, duration_minutes=duration_minutes)
        return True

    def list_for_user(self, user_id, *, start=None, end=None, limit=200):
        return [e for e in self.entries.values() if e.user_id == user_id]

    def delete_by_id(self, entry_id):
        return self.entries.pop(entry_id, None) is not None


@pytest.fixture
def repo():
    return FakeEntriesRepo()


@pytest.fixture
def service(repo):
    return TimesheetService(repo, FakeUsersRepo(), FakeTasksRepo())


def _as(user_id):
    return actor_from_user(USERS[user_id])


def test_minutes_between():
    assert minutes_between(datetime(2025, 3, 3, 9, 0), datetime(2025, 3, 3, 10, 30, 59)) == 90


def test_only_one_running_timer(service):
    start = datetime(2025, 3, 3, 9, 0)
    service.start_timer(_as(1), task_id=7, now=start)
    with pytest.raises(ValidationError):
        service.start_timer(_as(1), now=start + timedelta(minutes=5))


def test_stop_timer_records_duration_and_task_project(service):
    start = datetime(2025, 3, 3, 9, 0)
    service.start_timer(_as(1), task_id=7, now=start)
    entry = service.stop_timer(_as(1), now=start + timedelta(minutes=45))

    assert entry.duration_minutes == 45
    assert entry.project_id == 42
    assert not entry.is_running


def test_stop_without_timer_fails(service):
    with pytest.raises(ValidationError):
        service.stop_timer(_as(1))


def test_manual_entry_validation(service):
    start = datetime(2025, 3, 3, 9, 0)
    with pytest.raises(ValidationError):
        service.add_entry(_as(1), start_time=start, end_time=start)
    with pytest.raises(ValidationError):
        service.add_entry(_as(1), start_time=start, end_time=datetime.now() + timedelta(days=1))
    with pytest.raises(ValidationError):
        service.add_entry(_as(1), start_time=start, end_time=start + timedelta(hours=1), task_id=99)


def test_totals_skip_running_and_filter_billable(service):
    start = datetime(2025, 3, 3, 9, 0)
    service.add_entry(_as(1), start_time=start, end_time=start + timedelta(hours=2), is_billable=True)
    service.add_entry(_as(1), start_time=start + timedelta(hours=3), end_time=start + timedelta(hours=4))
    service.start_timer(_as(1), now=start + timedelta(hours=5))

    assert service.total_minutes(_as(1)) == 180
    assert service.total_minutes(_as(1), billable_only=True) == 120


def test_viewing_other_users_entries(service):
    with pytest.raises(AuthorizationError):
        service.list_entries(_as(2), user_id=1)
    assert service.list_entries(_as(3), user_id=1) == []
    with pytest.raises(NotFoundError):
        service.list_entries(_as(3), user_id=99)


def test_delete_entry_owner_or_admin(service, repo):
    start = datetime(2025, 3, 3, 9, 0)
    eid = service.add_entry(_as(1), start_time=start, end_time=start + timedelta(hours=1))
    with pytest.raises(AuthorizationError):
        service.delete_entry(_as(2), entry_id=eid)
    service.delete_entry(_as(3), entry_id=eid)
    assert repo.get_by_id(eid) is None


def test_manual_entry_accepts_offset_aware_times(service, repo):
    start = datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)
    end = datetime(2025, 3, 3, 10, 30, tzinfo=timezone(timedelta(hours=1)))

    eid = service.add_entry(_as(1), start_time=start, end_time=end)
    entry = repo.get_by_id(eid)
    assert entry.duration_minutes == 30
    assert entry.start_time.tzinfo is None
    assert entry.end_time.tzinfo is None


def test_offset_aware_end_before_start_is_rejected(service):
    start = datetime(2025, 3, 3, 10, 0, tzinfo=timezone.utc)
    end = datetime(2025, 3, 3, 10, 30, tzinfo=timezone(timedelta(hours=2)))
    with pytest.raises(ValidationError):
        service.add_entry(_as(1), start_time=start, end_time=end)
