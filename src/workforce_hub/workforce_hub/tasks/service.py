from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from ..access.actors import is_org_wide, record_owned_by
from ..access.evaluator import authorize_record
from ..access.guard import ensure, ensure_action
from ..access.model import Actor, Decision, RecordContext
from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_non_empty, require_positive_amount
from ..core.enums import Priority, TaskStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..projects.model import Project
from ..projects.service import ProjectService
from ..users.repository import UserRepository
from .model import Task, TaskStats
from .repository import TaskRepository

logger = logging.getLogger(__name__)


class TaskService:
    """Task board use cases.

    A task is managed by whoever may manage its project, and by its assignee
    and reporter for day-to-day edits (status, hours).
    """

    def __init__(self, tasks: TaskRepository, projects: ProjectService, users: UserRepository):
        self._tasks = tasks
        self._projects = projects
        self._users = users

    def _get(self, task_id: int) -> Task:
        task = self._tasks.get_by_id(int(task_id))
        if not task:
            raise NotFoundError("Task not found")
        return task

    def _person_record(self, user_id: Optional[int], project: Project) -> Optional[RecordContext]:
        if user_id is None:
            return None
        return record_owned_by(self._users.get_by_id(user_id), department_id=project.dept_id)

    def _authorize_project(self, actor: Actor, project: Project) -> Decision:
        return authorize_record(actor, self._projects.record_for(project))

    def _authorize_task(self, actor: Actor, task: Task, project: Project) -> Decision:
        decision = self._authorize_project(actor, project)
        if decision.allowed:
            return decision
        for user_id in (task.assignee_id, task.reporter_id):
            record = self._person_record(user_id, project)
            if record is None:
                continue
            candidate = authorize_record(actor, record)
            if candidate.allowed:
                return candidate
        return decision

    def _check_assignee(self, assignee_id: Optional[int]) -> Optional[int]:
        if assignee_id is None:
            return None
        assignee = self._users.get_by_id(int(assignee_id))
        if not assignee or not assignee.is_active:
            raise ValidationError("Assignee does not exist")
        return assignee.user_id

    def create_task(
        self,
        actor: Actor,
        *,
        project_id: int,
        title: str,
        description: Optional[str] = None,
        assignee_id: Optional[int] = None,
        priority: Priority = Priority.MEDIUM,
        due_date: Optional[date] = None,
        estimated_hours=None,
    ) -> int:
        ensure_action(actor, "create-task")
        project = self._projects.get_project(actor, project_id)
        title = require_non_empty(title, "Title")
        estimate: Optional[Decimal] = (
            require_positive_amount(estimated_hours, "Estimated hours") if estimated_hours not in (None, "") else None
        )

        task_id = self._tasks.create(
            title=title,
            description=optional_text(description, "Description"),
            project_id=project.project_id,
            reporter_id=actor.user_id,
            assignee_id=self._check_assignee(assignee_id),
            priority=priority,
            due_date=due_date,
            estimated_hours=estimate,
        )
        logger.info("task created task_id=%s project_id=%s by=%s", task_id, project.project_id, actor.user_id)
        return task_id

    def move_task(self, actor: Actor, *, task_id: int, status: TaskStatus) -> None:
        ensure_action(actor, "edit-task")
        task = self._get(task_id)
        project = self._projects.get_project(actor, task.project_id)
        ensure(self._authorize_task(actor, task, project), actor=actor, action="edit-task")

        if task.status == status:
            return
        if status is TaskStatus.DONE and task.assignee_id is None:
            raise ValidationError("Assign the task before completing it")
        if not self._tasks.update_status(task.task_id, status=status):
            raise ValidationError("Failed to update task status")

    def update_task(
        self,
        actor: Actor,
        *,
        task_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        priority: Optional[Priority] = None,
        due_date: Optional[date] = None,
        estimated_hours=None,
    ) -> Task:
        """Edit task details; omitted fields keep their value."""
        ensure_action(actor, "edit-task")
        task = self._get(task_id)
        project = self._projects.get_project(actor, task.project_id)
        ensure(self._authorize_task(actor, task, project), actor=actor, action="edit-task")

        if estimated_hours in (None, ""):
            estimate = task.estimated_hours
        else:
            estimate = require_positive_amount(estimated_hours, "Estimated hours")
        ok = self._tasks.update_details(
            task.task_id,
            title=require_non_empty(title, "Title") if title is not None else task.title,
            description=optional_text(description, "Description") if description is not None else task.description,
            priority=priority or task.priority,
            due_date=due_date or task.due_date,
            estimated_hours=estimate,
        )
        if not ok:
            raise ValidationError("Failed to update task")
        return self._get(task.task_id)

    def assign_task(self, actor: Actor, *, task_id: int, assignee_id: Optional[int]) -> None:
        ensure_action(actor, "edit-task")
        task = self._get(task_id)
        project = self._projects.get_project(actor, task.project_id)

        # Reassignment is a project-level decision, the reporter may also (re)assign.
        decision = self._authorize_project(actor, project)
        if not decision.allowed and task.reporter_id == actor.user_id:
            decision = authorize_record(actor, self._person_record(task.reporter_id, project))
        ensure(decision, actor=actor, action="assign-task")

        if not self._tasks.assign(task.task_id, assignee_id=self._check_assignee(assignee_id)):
            raise ValidationError("Failed to assign task")

    def log_hours(self, actor: Actor, *, task_id: int, actual_hours) -> None:
        ensure_action(actor, "edit-task")
        task = self._get(task_id)
        project = self._projects.get_project(actor, task.project_id)
        ensure(self._authorize_task(actor, task, project), actor=actor, action="edit-task")
        if not self._tasks.log_hours(task.task_id, actual_hours=require_positive_amount(actual_hours, "Hours")):
            raise ValidationError("Failed to log hours")

    def delete_task(self, actor: Actor, *, task_id: int) -> None:
        ensure_action(actor, "delete-task")
        task = self._get(task_id)
        project = self._projects.get_project(actor, task.project_id)
        ensure(self._authorize_project(actor, project), actor=actor, action="delete-task")
        if not self._tasks.delete_by_id(task.task_id):
            raise ValidationError("Failed to delete task")

    def list_visible(self, actor: Actor, *, project_id: Optional[int] = None) -> Sequence[Task]:
        if project_id is not None:
            project = self._projects.get_project(actor, project_id)
            return self._tasks.list_tasks(project_id=project.project_id)
        if is_org_wide(actor):
            return self._tasks.list_tasks()
        if actor.department_id is not None:
            return self._tasks.list_tasks(dept_id=actor.department_id)
        return self._tasks.list_tasks(assignee_id=actor.user_id)

    def my_tasks(self, actor: Actor) -> Sequence[Task]:
        return self._tasks.list_tasks(assignee_id=actor.user_id)

    def board(self, actor: Actor, *, project_id: Optional[int] = None) -> Dict[str, List[Task]]:
        """Tasks grouped into board columns, in TaskStatus order."""
        columns: Dict[str, List[Task]] = {s.value: [] for s in TaskStatus}
        for task in self.list_visible(actor, project_id=project_id):
            columns[task.status.value].append(task)
        return columns

    def stats(self, actor: Actor, *, project_id: Optional[int] = None, today: Optional[date] = None) -> TaskStats:
        """Counts over the tasks the actor can see, optionally one project."""
        tasks = self.list_visible(actor, project_id=project_id)
        today = today or now_local().date()

        by_status = {s.value: 0 for s in TaskStatus}
        by_priority = {p.value: 0 for p in Priority}
        for task in tasks:
            by_status[task.status.value] += 1
            by_priority[task.priority.value] += 1

        return TaskStats(
            total_tasks=len(tasks),
            completed=by_status[TaskStatus.DONE.value],
            overdue=sum(1 for t in tasks if t.due_date and t.due_date < today and t.status is not TaskStatus.DONE),
            estimated_hours=sum((t.estimated_hours or Decimal("0") for t in tasks), Decimal("0")),
            actual_hours=sum((t.actual_hours or Decimal("0") for t in tasks), Decimal("0")),
            by_status=by_status,
            by_priority=by_priority,
        )
