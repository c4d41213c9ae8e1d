from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Optional

from ..core.enums import Priority, TaskStatus


@dataclass(frozen=True)
class Task:
    task_id: int
    title: str
    project_id: int
    reporter_id: int
    status: TaskStatus = TaskStatus.TODO
    priority: Priority = Priority.MEDIUM
    assignee_id: Optional[int] = None
    description: Optional[str] = None
    due_date: Optional[date] = None
    estimated_hours: Optional[Decimal] = None
    actual_hours: Optional[Decimal] = None


@dataclass(frozen=True)
class TaskStats:
    total_tasks: int
    completed: int
    overdue: int
    estimated_hours: Decimal
    actual_hours: Decimal
    by_status: Dict[str, int] = field(default_factory=dict)
    by_priority: Dict[str, int] = field(default_factory=dict)
