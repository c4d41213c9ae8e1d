from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import Priority, ProjectStatus
from .model import Project


class ProjectRepository(Protocol):
    def get_by_id(self, project_id: int) -> Optional[Project]:
        raise NotImplementedError

    def list_projects(
        self,
        *,
        dept_id: Optional[int] = None,
        manager_id: Optional[int] = None,
        status: Optional[ProjectStatus] = None,
        limit: int = 200,
    ) -> Sequence[Project]:
        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        description: Optional[str],
        dept_id: int,
        manager_id: int,
        priority: Priority,
        start_date: Optional[date],
        end_date: Optional[date],
        budget: Optional[Decimal],
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        project_id: int,
        *,
        name: str,
        description: Optional[str],
        priority: Priority,
        start_date: Optional[date],
        end_date: Optional[date],
        budget: Optional[Decimal],
    ) -> bool:
        raise NotImplementedError

    def update_status(self, project_id: int, *, status: ProjectStatus) -> bool:
        raise NotImplementedError

    def delete_by_id(self, project_id: int) -> bool:
        raise NotImplementedError
