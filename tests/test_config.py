import importlib

import pytest

from config import get_settings_module


@pytest.mark.parametrize(
    "env, module",
    [
        ("production", "config.production"),
        ("PROD", "config.production"),
        ("testing", "config.testing"),
        ("test", "config.testing"),
        ("development", "config.development"),
        ("staging", "config.development"),
    ],
)
def test_settings_module_by_env(env, module):
    assert get_settings_module(env) == module


def test_settings_module_reads_app_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    assert get_settings_module() == "config.testing"

    monkeypatch.delenv("APP_ENV")
    assert get_settings_module() == "config.development"


def test_testing_settings_never_touch_the_database_on_startup():
    settings = importlib.import_module("config.testing")
    assert settings.TESTING is True
    assert settings.AUTO_INIT_DB is False
    assert settings.AUTO_SEED_DB is False
