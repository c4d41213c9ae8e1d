from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import Priority, TaskStatus
from .model import Task


class TaskRepository(Protocol):
    def get_by_id(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    def list_tasks(
        self,
        *,
        project_id: Optional[int] = None,
        assignee_id: Optional[int] = None,
        dept_id: Optional[int] = None,
        limit: int = 500,
    ) -> Sequence[Task]:
        """`dept_id` filters on the owning project's department."""

        raise NotImplementedError

    def create(
        self,
        *,
        title: str,
        description: Optional[str],
        project_id: int,
        reporter_id: int,
        assignee_id: Optional[int],
        priority: Priority,
        due_date: Optional[date],
        estimated_hours: Optional[Decimal],
    ) -> int:
        raise NotImplementedError

    def update_details(
        self,
        task_id: int,
        *,
        title: str,
        description: Optional[str],
        priority: Priority,
        due_date: Optional[date],
        estimated_hours: Optional[Decimal],
    ) -> bool:
        raise NotImplementedError

    def update_status(self, task_id: int, *, status: TaskStatus) -> bool:
        raise NotImplementedError

    def assign(self, task_id: int, *, assignee_id: Optional[int]) -> bool:
        raise NotImplementedError

    def log_hours(self, task_id: int, *, actual_hours: Decimal) -> bool:
        raise NotImplementedError

    def delete_by_id(self, task_id: int) -> bool:
        raise NotImplementedError
