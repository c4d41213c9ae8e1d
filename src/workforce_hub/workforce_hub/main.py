from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .attendance.model import WorkdayPolicy
from .common.datetime_utils import parse_hhmm
from .common.http import ok, register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .expenses.controller import register as register_expenses
from .leave.controller import register as register_leave
from .projects.controller import register as register_projects
from .tasks.controller import register as register_tasks
from .timesheets.controller import register as register_timesheets
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

_DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def _workday_policy(settings) -> WorkdayPolicy:
    return WorkdayPolicy(
        start=parse_hhmm(getattr(settings, "WORKDAY_START", "09:00")),
        grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", 15)),
    )


def _prepare_database(settings, db_config: dict) -> None:
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=_DATABASE_DIR / "schema.sql")
        logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=_DATABASE_DIR / "seed.sql")
        ensure_demo_users(db_config)
        logger.info("demo seed ready")


def create_app(container: Optional[Container] = None) -> Flask:
    """Flask app factory.

    `container` lets tests wire in-memory repositories instead of MySQL.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        _prepare_database(settings, db_config)
        container = build_container(db_config=db_config, workday_policy=_workday_policy(settings))

    register_error_handlers(app)

    @app.route("/api/health", endpoint="health")
    def health():
        return ok({"status": "ok"})

    register_users(app, container)
    register_projects(app, container)
    register_tasks(app, container)
    register_timesheets(app, container)
    register_attendance(app, container)
    register_leave(app, container)
    register_expenses(app, container)

    return app
