from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.workforce_hub.workforce_hub.common.datetime_utils import inclusive_days, parse_iso_datetime, to_naive_local


def test_naive_values_pass_through():
    value = datetime(2025, 3, 3, 9, 0)
    assert to_naive_local(value) is value


def test_aware_values_become_naive_local_time():
    aware = datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)
    naive = to_naive_local(aware)
    assert naive.tzinfo is None
    assert naive == aware.astimezone().replace(tzinfo=None)


def test_offsets_are_compared_on_the_same_clock():
    utc = to_naive_local(datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc))
    plus_two = to_naive_local(datetime(2025, 3, 3, 11, 0, tzinfo=timezone(timedelta(hours=2))))
    assert utc == plus_two


def test_parse_iso_datetime():
    assert parse_iso_datetime("2025-03-03T09:30:00") == datetime(2025, 3, 3, 9, 30)
    assert parse_iso_datetime("2025-03-03T09:30:00+00:00").tzinfo is None
    with pytest.raises(ValueError):
        parse_iso_datetime("yesterday")


def test_inclusive_days():
    start = datetime(2025, 7, 7).date()
    assert inclusive_days(start, start) == 1
    assert inclusive_days(start, start + timedelta(days=4)) == 5
