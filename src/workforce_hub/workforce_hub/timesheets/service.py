from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..access.actors import record_for_user
from ..access.evaluator import authorize_record
from ..access.guard import ensure
from ..access.model import Actor
from ..common.datetime_utils import now_local, to_naive_local
from ..common.validators import optional_text
from ..core.exceptions import NotFoundError, ValidationError
from ..tasks.repository import TaskRepository
from ..users.repository import UserRepository
from .model import TimeEntry
from .repository import TimeEntryRepository


def minutes_between(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 60)


class TimesheetService:
    """Time tracking: a running timer per user plus manual entries."""

    def __init__(self, entries: TimeEntryRepository, users: UserRepository, tasks: Optional[TaskRepository] = None):
        self._entries = entries
        self._users = users
        self._tasks = tasks

    def _resolve_project(self, task_id: Optional[int], project_id: Optional[int]) -> Optional[int]:
        if task_id is None or self._tasks is None:
            return project_id
        task = self._tasks.get_by_id(int(task_id))
        if not task:
            raise ValidationError("Task does not exist")
        return task.project_id

    def _ensure_can_view(self, actor: Actor, user_id: int) -> None:
        if user_id == actor.user_id:
            return
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        ensure(authorize_record(actor, record_for_user(user)), actor=actor, action="view-time-entries")

    def start_timer(
        self,
        actor: Actor,
        *,
        task_id: Optional[int] = None,
        project_id: Optional[int] = None,
        description: Optional[str] = None,
        is_billable: bool = False,
        now: Optional[datetime] = None,
    ) -> int:
        if self._entries.get_running(actor.user_id):
            raise ValidationError("A timer is already running, stop it first")
        return self._entries.create(
            user_id=actor.user_id,
            start_time=now or now_local(),
            end_time=None,
            duration_minutes=None,
            task_id=task_id,
            project_id=self._resolve_project(task_id, project_id),
            description=optional_text(description, "Description"),
            is_billable=bool(is_billable),
        )

    def stop_timer(self, actor: Actor, *, now: Optional[datetime] = None) -> TimeEntry:
        running = self._entries.get_running(actor.user_id)
        if not running:
            raise ValidationError("No timer is running")

        end = now or now_local()
        if end < running.start_time:
            raise ValidationError("Timer cannot stop before it started")
        duration = minutes_between(running.start_time, end)
        if not self._entries.stop(running.entry_id, end_time=end, duration_minutes=duration):
            raise ValidationError("Failed to stop timer")
        return self._entries.get_by_id(running.entry_id)

    def add_entry(
        self,
        actor: Actor,
        *,
        start_time: datetime,
        end_time: datetime,
        task_id: Optional[int] = None,
        project_id: Optional[int] = None,
        description: Optional[str] = None,
        is_billable: bool = False,
    ) -> int:
        start_time, end_time = to_naive_local(start_time), to_naive_local(end_time)
        if end_time <= start_time:
            raise ValidationError("End time must be after start time")
        if end_time > now_local():
            raise ValidationError("Time entries cannot be in the future")
        return self._entries.create(
            user_id=actor.user_id,
            start_time=start_time,
            end_time=end_time,
            duration_minutes=minutes_between(start_time, end_time),
            task_id=task_id,
            project_id=self._resolve_project(task_id, project_id),
            description=optional_text(description, "Description"),
            is_billable=bool(is_billable),
        )

    def list_entries(
        self,
        actor: Actor,
        *,
        user_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[TimeEntry]:
        target = int(user_id) if user_id is not None else actor.user_id
        self._ensure_can_view(actor, target)
        return self._entries.list_for_user(target, start=start, end=end)

    def total_minutes(
        self,
        actor: Actor,
        *,
        user_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        billable_only: bool = False,
    ) -> int:
        entries = self.list_entries(actor, user_id=user_id, start=start, end=end)
        return sum(
            e.duration_minutes or 0
            for e in entries
            if not e.is_running and (e.is_billable or not billable_only)
        )

    def delete_entry(self, actor: Actor, *, entry_id: int) -> None:
        entry = self._entries.get_by_id(int(entry_id))
        if not entry:
            raise NotFoundError("Time entry not found")
        owner = self._users.get_by_id(entry.user_id)
        if owner is None:
            raise NotFoundError("User not found")
        ensure(authorize_record(actor, record_for_user(owner)), actor=actor, action="delete-time-entry")
        if not self._entries.delete_by_id(entry.entry_id):
            raise ValidationError("Failed to delete time entry")
