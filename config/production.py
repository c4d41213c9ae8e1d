import os

from config.config import Config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
DB_CONFIG = Config.db_config()

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL

WORKDAY_START = Config.WORKDAY_START
LATE_GRACE_MINUTES = Config.LATE_GRACE_MINUTES

AUTO_INIT_DB = Config.AUTO_INIT_DB
AUTO_SEED_DB = Config.AUTO_SEED_DB
