import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "workforce_hub_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

WORKDAY_START = "09:00"
LATE_GRACE_MINUTES = 15

AUTO_INIT_DB = False
AUTO_SEED_DB = False
