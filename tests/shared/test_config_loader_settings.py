# backend/tests/shared/test_config_loader_settings.py
# -*- coding: utf-8 -*-
"""
Selección de settings por PYTHON_ENV y validaciones de coherencia.
"""

import pytest

from schoolpay.shared.config import get_settings, settings
from schoolpay.shared.config.settings_dev import DevSettings
from schoolpay.shared.config.settings_testing import EnvTestingSettings
from schoolpay.shared.config.logging_config import build_logging_config


@pytest.fixture
def fresh_settings(monkeypatch):
    """Limpia el cache antes y después para no contaminar otros tests."""
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


def test_test_env_loads_testing_settings(fresh_settings):
    fresh_settings.setenv("PYTHON_ENV", "test")

    s = get_settings()

    assert isinstance(s, EnvTestingSettings)
    assert s.is_test
    assert s.webhook_retry_scheduler_enabled is False
    assert s.gateway_status_url is None
    assert s.database_url.startswith("sqlite+aiosqlite")


def test_development_is_the_default(fresh_settings):
    fresh_settings.delenv("PYTHON_ENV", raising=False)

    s = get_settings()

    assert isinstance(s, DevSettings)
    assert s.is_dev


def test_webhook_retry_values_from_env(fresh_settings):
    fresh_settings.setenv("PYTHON_ENV", "test")
    fresh_settings.setenv("WEBHOOK_MAX_RETRIES", "5")
    fresh_settings.setenv("WEBHOOK_RETRY_BASE_DELAY_SECONDS", "30")

    s = get_settings()

    assert s.webhook_max_retries == 5
    assert s.webhook_retry_base_delay_seconds == 30


@pytest.mark.parametrize(
    "var, value",
    [
        ("WEBHOOK_MAX_RETRIES", "-1"),
        ("WEBHOOK_RETRY_BASE_DELAY_SECONDS", "0"),
        ("GATEWAY_STATUS_TIMEOUT_SECONDS", "0"),
        ("STATUS_RETRY_AFTER_SECONDS", "0"),
        ("STATUS_RETRY_AFTER_SECONDS", "61"),
    ],
)
def test_incoherent_values_are_rejected(fresh_settings, var, value):
    fresh_settings.setenv("PYTHON_ENV", "test")
    fresh_settings.setenv(var, value)

    with pytest.raises(ValueError):
        get_settings()


def test_settings_proxy_delegates(fresh_settings):
    fresh_settings.setenv("PYTHON_ENV", "test")

    assert settings.python_env == "test"
    assert settings.api_prefix == get_settings().api_prefix


def test_json_logging_config_tags_service():
    config = build_logging_config("info", "json", service_name="schoolpay-test")

    assert config["handlers"]["console"]["formatter"] == "json"
    assert config["formatters"]["json"]["static_fields"] == {"service": "schoolpay-test"}
    assert config["root"]["level"] == "INFO"
    assert config["loggers"]["httpx"]["level"] == "WARNING"
    assert config["loggers"]["apscheduler"]["level"] == "WARNING"


def test_plain_logging_config():
    config = build_logging_config("ERROR", "pretty")

    assert config["handlers"]["console"]["formatter"] == "console"
    assert config["loggers"]["apscheduler"]["level"] == "ERROR"

# Fin del archivo backend/tests/shared/test_config_loader_settings.py
