from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import TimeEntry


class TimeEntryRepository(Protocol):
    def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        raise NotImplementedError

    def get_running(self, user_id: int) -> Optional[TimeEntry]:
        raise NotImplementedError

    def create(
        self,
        *,
        user_id: int,
        start_time: datetime,
        end_time: Optional[datetime],
        duration_minutes: Optional[int],
        task_id: Optional[int],
        project_id: Optional[int],
        description: Optional[str],
        is_billable: bool,
    ) -> int:
        raise NotImplementedError

    def stop(self, entry_id: int, *, end_time: datetime, duration_minutes: int) -> bool:
        raise NotImplementedError

    def list_for_user(
        self,
        user_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: int = 200,
    ) -> Sequence[TimeEntry]:
        raise NotImplementedError

    def delete_by_id(self, entry_id: int) -> bool:
        raise NotImplementedError
