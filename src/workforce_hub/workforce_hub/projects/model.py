from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Optional

from ..core.enums import Priority, ProjectStatus


@dataclass(frozen=True)
class Project:
    project_id: int
    name: str
    dept_id: int
    manager_id: int
    status: ProjectStatus = ProjectStatus.PLANNING
    priority: Priority = Priority.MEDIUM
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[Decimal] = None


@dataclass(frozen=True)
class ProjectStats:
    total_projects: int
    active: int
    completed: int
    total_budget: Decimal
    average_budget: Decimal
    average_duration_days: Optional[int]
    by_status: Dict[str, int] = field(default_factory=dict)
    by_priority: Dict[str, int] = field(default_factory=dict)
