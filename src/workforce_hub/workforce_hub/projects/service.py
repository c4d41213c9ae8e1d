from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from ..access.actors import is_org_wide, record_owned_by
from ..access.evaluator import authorize_record
from ..access.guard import NOT_PERMITTED, ensure, ensure_action
from ..access.model import Actor, RecordContext
from ..common.validators import optional_text, require_date_range, require_non_empty, require_positive_amount
from ..core.constants import STATS_LIMIT
from ..core.enums import Priority, ProjectStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.department_repository import DepartmentRepository
from ..users.repository import UserRepository
from .model import Project, ProjectStats
from .repository import ProjectRepository

logger = logging.getLogger(__name__)


class ProjectService:
    def __init__(self, projects: ProjectRepository, users: UserRepository, departments: DepartmentRepository):
        self._projects = projects
        self._users = users
        self._departments = departments

    def record_for(self, project: Project) -> RecordContext:
        """The project's manager owns it; the project's department scopes it."""
        return record_owned_by(self._users.get_by_id(project.manager_id), department_id=project.dept_id)

    def get_project(self, actor: Actor, project_id: int) -> Project:
        project = self._projects.get_by_id(int(project_id))
        if not project:
            raise NotFoundError("Project not found")
        if not self.can_view(actor, project):
            raise AuthorizationError(NOT_PERMITTED)
        return project

    @staticmethod
    def can_view(actor: Actor, project: Project) -> bool:
        return (
            is_org_wide(actor)
            or project.manager_id == actor.user_id
            or (actor.department_id is not None and project.dept_id == actor.department_id)
        )

    def list_visible(self, actor: Actor, *, status: Optional[ProjectStatus] = None) -> Sequence[Project]:
        if is_org_wide(actor):
            return self._projects.list_projects(status=status)
        if actor.department_id is not None:
            return self._projects.list_projects(dept_id=actor.department_id, status=status)
        return self._projects.list_projects(manager_id=actor.user_id, status=status)

    def create_project(
        self,
        actor: Actor,
        *,
        name: str,
        dept_id: int,
        manager_id: Optional[int] = None,
        description: Optional[str] = None,
        priority: Priority = Priority.MEDIUM,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        budget=None,
    ) -> int:
        ensure_action(actor, "create-project")
        name = require_non_empty(name, "Project name")
        if start_date is not None:
            require_date_range(start_date, end_date)
        budget_value: Optional[Decimal] = require_positive_amount(budget, "Budget") if budget not in (None, "") else None

        if not self._departments.get_by_id(int(dept_id)):
            raise ValidationError("Department does not exist")
        manager = self._users.get_by_id(int(manager_id) if manager_id is not None else actor.user_id)
        if not manager or not manager.is_active:
            raise ValidationError("Project manager does not exist")

        if not is_org_wide(actor) and int(dept_id) != actor.department_id:
            raise AuthorizationError(NOT_PERMITTED)
        ensure(
            authorize_record(actor, record_owned_by(manager, department_id=int(dept_id))),
            actor=actor,
            action="create-project",
        )

        project_id = self._projects.create(
            name=name,
            description=optional_text(description, "Description"),
            dept_id=int(dept_id),
            manager_id=manager.user_id,
            priority=priority,
            start_date=start_date,
            end_date=end_date,
            budget=budget_value,
        )
        logger.info("project created project_id=%s dept_id=%s by=%s", project_id, dept_id, actor.user_id)
        return project_id

    def update_project(
        self,
        actor: Actor,
        *,
        project_id: int,
        name: str,
        description: Optional[str] = None,
        priority: Priority = Priority.MEDIUM,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        budget=None,
    ) -> None:
        ensure_action(actor, "edit-project")
        project = self.get_project(actor, project_id)
        ensure(authorize_record(actor, self.record_for(project)), actor=actor, action="edit-project")
        if start_date is not None:
            require_date_range(start_date, end_date)

        ok = self._projects.update(
            project.project_id,
            name=require_non_empty(name, "Project name"),
            description=optional_text(description, "Description"),
            priority=priority,
            start_date=start_date,
            end_date=end_date,
            budget=require_positive_amount(budget, "Budget") if budget not in (None, "") else None,
        )
        if not ok:
            raise ValidationError("Failed to update project")

    def change_status(self, actor: Actor, *, project_id: int, status: ProjectStatus) -> None:
        ensure_action(actor, "edit-project")
        project = self.get_project(actor, project_id)
        ensure(authorize_record(actor, self.record_for(project)), actor=actor, action="edit-project")
        if project.status in (ProjectStatus.COMPLETED, ProjectStatus.CANCELLED) and status is ProjectStatus.PLANNING:
            raise ValidationError("A closed project cannot go back to planning")
        if not self._projects.update_status(project.project_id, status=status):
            raise ValidationError("Failed to update project status")

    def delete_project(self, actor: Actor, *, project_id: int) -> None:
        ensure_action(actor, "delete-project")
        project = self.get_project(actor, project_id)
        ensure(authorize_record(actor, self.record_for(project)), actor=actor, action="delete-project")
        if not self._projects.delete_by_id(project.project_id):
            raise ValidationError("Failed to delete project")

    def stats(self, actor: Actor, *, dept_id: Optional[int] = None) -> ProjectStats:
        """Portfolio summary over visible projects, or one department's."""
        if dept_id is None:
            projects = self.list_visible(actor)
        elif is_org_wide(actor) or int(dept_id) == actor.department_id:
            projects = self._projects.list_projects(dept_id=int(dept_id), limit=STATS_LIMIT)
        else:
            raise AuthorizationError(NOT_PERMITTED)

        by_status = {s.value: 0 for s in ProjectStatus}
        by_priority = {p.value: 0 for p in Priority}
        for p in projects:
            by_status[p.status.value] += 1
            by_priority[p.priority.value] += 1

        budgets = [p.budget for p in projects if p.budget is not None]
        total_budget = sum(budgets, Decimal("0"))
        average_budget = Decimal("0.00")
        if budgets:
            average_budget = (total_budget / len(budgets)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        durations = [(p.end_date - p.start_date).days for p in projects if p.start_date and p.end_date]
        return ProjectStats(
            total_projects=len(projects),
            active=by_status[ProjectStatus.ACTIVE.value],
            completed=by_status[ProjectStatus.COMPLETED.value],
            total_budget=total_budget,
            average_budget=average_budget,
            average_duration_days=round(sum(durations) / len(durations)) if durations else None,
            by_status=by_status,
            by_priority=by_priority,
        )
