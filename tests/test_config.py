"""
Tests for config.py loaded from disk.

conftest.py replaces the config module with a mock, so the real file is
loaded under a private module name here.
"""

import importlib.util
from pathlib import Path

import pytest

from enums.runtime_environment import RuntimeEnvironment

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.py"


def load_config():
    module_spec = importlib.util.spec_from_file_location("shop_config_under_test", CONFIG_PATH)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


class TestConfig:

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch, tmp_path):
        # No .env in the working directory
        monkeypatch.chdir(tmp_path)
        for name in ("LOGIN_MAX_ATTEMPTS", "LOGIN_LOCK_HOURS", "LOG_RETENTION_DAYS", "SESSION_SECRET"):
            monkeypatch.delenv(name, raising=False)

    def test_production_starts_with_defaults_only(self, monkeypatch):
        monkeypatch.setenv("RUNTIME_ENVIRONMENT", "PROD")
        shop_config = load_config()
        assert shop_config.RUNTIME_ENVIRONMENT == RuntimeEnvironment.PROD
        assert shop_config.LOG_RETENTION_DAYS == 5
        assert not hasattr(shop_config, "SESSION_SECRET")

    def test_login_guard_defaults(self, monkeypatch):
        monkeypatch.setenv("RUNTIME_ENVIRONMENT", "DEV")
        shop_config = load_config()
        assert shop_config.LOGIN_MAX_ATTEMPTS == 5
        assert shop_config.LOGIN_LOCK_HOURS == 24
        assert shop_config.LOG_RETENTION_DAYS == 30

    def test_invalid_runtime_environment_exits(self, monkeypatch):
        monkeypatch.setenv("RUNTIME_ENVIRONMENT", "STAGING")
        with pytest.raises(SystemExit):
            load_config()
