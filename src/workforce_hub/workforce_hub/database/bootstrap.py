"""Apply schema/seed SQL files and create demo accounts."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from ..core.enums import Role
from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "demo1234"

# (full name, email, role, department name)
DEMO_USERS = (
    ("Sam Super", "super@workforce.local", Role.SUPER_ADMIN, None),
    ("Olivia Org", "org@workforce.local", Role.ORG_ADMIN, None),
    ("Dana Dept", "dept.eng@workforce.local", Role.DEPT_ADMIN, "Engineering"),
    ("Sean Sales", "dept.sales@workforce.local", Role.DEPT_ADMIN, "Sales"),
    ("Hana HR", "hr@workforce.local", Role.HR, "Human Resources"),
    ("Paul PM", "pm@workforce.local", Role.PROJECT_MANAGER, "Engineering"),
    ("Tina Lead", "lead@workforce.local", Role.TEAM_LEAD, "Engineering"),
    ("Eli Employee", "employee@workforce.local", Role.EMPLOYEE, "Engineering"),
    ("Cora Contractor", "contractor@workforce.local", Role.CONTRACTOR, "Engineering"),
    ("Ian Intern", "intern@workforce.local", Role.INTERN, "Sales"),
    ("Tom Trainee", "trainee@workforce.local", Role.TRAINEE, "Sales"),
)

DEMO_DEPARTMENTS = (
    ("Engineering", "Product and platform engineering"),
    ("Sales", "Sales and customer success"),
    ("Human Resources", "People operations"),
)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql independent of the configured database name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal splitter: ';' ends a statement unless inside quotes; '--' lines are comments.
    buf: list[str] = []
    quote = None
    escape = False

    for line in sql.splitlines(keepends=True):
        if quote is None and line.lstrip().startswith("--"):
            continue
        for ch in line:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif quote and ch == quote:
                quote = None
            elif not quote and ch in ("'", '"'):
                quote = ch
            elif not quote and ch == ";":
                stmt = "".join(buf).strip()
                buf.clear()
                if stmt:
                    yield stmt
                continue
            buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_sql_file(conn_factory: DatabaseConnection, path: Path) -> int:
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))
    conn = conn_factory.connect()
    count = 0
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    return count


def ensure_database_exists(db_config: dict) -> None:
    config = DBConfig.from_mapping(db_config)
    conn = DatabaseConnection(config).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_sql_file(DatabaseConnection(DBConfig.from_mapping(db_config)), Path(schema_path))
    logger.info("applied schema %s (%d statements)", schema_path, count)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_sql_file(DatabaseConnection(DBConfig.from_mapping(db_config)), Path(seed_path))
    logger.info("applied seed %s (%d statements)", seed_path, count)


def ensure_demo_users(db_config: dict) -> None:
    """Upsert demo departments and one demo account per role."""
    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = conn.cursor(dictionary=True)

        dept_ids: dict[str, int] = {}
        for name, description in DEMO_DEPARTMENTS:
            cur.execute("SELECT dept_id FROM departments WHERE dept_name=%s", (name,))
            row = cur.fetchone()
            if row:
                dept_ids[name] = int(row["dept_id"])
                continue
            cur.execute(
                "INSERT INTO departments (dept_name, description, is_active) VALUES (%s, %s, 1)",
                (name, description),
            )
            dept_ids[name] = int(cur.lastrowid)

        password_hash = generate_password_hash(DEMO_PASSWORD)
        for full_name, email, role, dept_name in DEMO_USERS:
            dept_id = dept_ids.get(dept_name) if dept_name else None
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            if cur.fetchone():
                cur.execute(
                    """
                    UPDATE users
                    SET full_name=%s, password_hash=%s, role=%s, dept_id=%s, is_active=1
                    WHERE email=%s
                    """,
                    (full_name, password_hash, role.value, dept_id, email),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO users (full_name, email, password_hash, role, dept_id, is_active)
                    VALUES (%s, %s, %s, %s, %s, 1)
                    """,
                    (full_name, email, password_hash, role.value, dept_id),
                )

        conn.commit()
    finally:
        conn.close()
    logger.info("demo users ready (%d accounts)", len(DEMO_USERS))


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
