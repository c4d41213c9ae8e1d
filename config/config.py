import os


class Config:
    """Shared defaults, overridable from the environment (.env is loaded by the app factory)."""

    SECRET_KEY = os.environ.get("SECRET_KEY") or "change-me"

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "workforce_hub")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Attendance policy
    WORKDAY_START = os.environ.get("WORKDAY_START", "09:00")
    LATE_GRACE_MINUTES = int(os.environ.get("LATE_GRACE_MINUTES", "15"))

    # Dev helpers
    AUTO_INIT_DB = bool(int(os.environ.get("AUTO_INIT_DB", "0")))
    AUTO_SEED_DB = bool(int(os.environ.get("AUTO_SEED_DB", "0")))

    @classmethod
    def db_config(cls) -> dict:
        return {
            "host": cls.DB_HOST,
            "port": cls.DB_PORT,
            "user": cls.DB_USER,
            "password": cls.DB_PASSWORD,
            "database": cls.DB_NAME,
        }
