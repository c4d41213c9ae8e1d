import os

from config.config import Config

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
DB_CONFIG = Config.db_config()

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()

WORKDAY_START = Config.WORKDAY_START
LATE_GRACE_MINUTES = Config.LATE_GRACE_MINUTES

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo users on startup
AUTO_SEED_DB = Config.AUTO_SEED_DB
