from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class TimeEntry:
    entry_id: int
    user_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    task_id: Optional[int] = None
    project_id: Optional[int] = None
    description: Optional[str] = None
    is_billable: bool = False

    @property
    def is_running(self) -> bool:
        return self.end_time is None
