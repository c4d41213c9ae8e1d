from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: str) -> time:
    return datetime.strptime(value.strip(), "%H:%M").time()


def inclusive_days(start: date, end: date) -> int:
    return (end - start).days + 1


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def to_naive_local(value: datetime) -> datetime:
    """Drop a UTC offset by converting to local wall-clock time."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO 8601 timestamp into naive local time."""
    return to_naive_local(datetime.fromisoformat(value))
