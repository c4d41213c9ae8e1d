"""Seed departments and one demo account per role.

Every demo account uses the password from `DEMO_PASSWORD` in the bootstrap module.
"""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.workforce_hub.workforce_hub.database.bootstrap import DEMO_USERS, apply_seed_sql, ensure_demo_users


def main() -> None:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    ensure_demo_users(db_config)

    print(f"OK: seeded {db_config.get('database')} with {len(DEMO_USERS)} demo accounts:")
    for _, email, role, dept_name in DEMO_USERS:
        print(f"  {role.value:<16} {email:<28} {dept_name or '-'}")


if __name__ == "__main__":
    main()
