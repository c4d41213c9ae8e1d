import os
from typing import Optional

_SETTINGS_BY_ENV = {
    "development": "config.development",
    "dev": "config.development",
    "testing": "config.testing",
    "test": "config.testing",
    "production": "config.production",
    "prod": "config.production",
}


def get_settings_module(env: Optional[str] = None) -> str:
    """Settings module for APP_ENV (or `env`), development when unset or unknown."""
    name = (env if env is not None else os.getenv("APP_ENV", "development")).strip().lower()
    return _SETTINGS_BY_ENV.get(name, "config.development")
