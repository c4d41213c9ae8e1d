from __future__ import annotations

from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def optional_int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


def optional_decimal(value: Any) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None


def build_where(filters: Sequence[tuple[str, Any]]) -> tuple[str, list]:
    """Build `WHERE a=%s AND b=%s` from (clause, value) pairs, skipping None values.

    A clause without a placeholder (e.g. "x IS NULL") is added when its value is True.
    """
    clauses: list[str] = []
    params: list = []
    for clause, value in filters:
        if value is None or value is False:
            continue
        clauses.append(clause)
        if "%s" in clause:
            if isinstance(value, (list, tuple)):
                params.extend(value)
            else:
                params.append(value)
    if not clauses:
        return "", params
    return "WHERE " + " AND ".join(clauses), params
