from __future__ import annotations

"""
Unit tests for settings validation and loading.

Verifies:
1. Defaults when no settings are given.
2. Coercion of loosely typed values with warnings.
3. Strict mode raising ConfigurationError.
4. Email section handling, including the password environment variable.
"""

import json

import pytest

from tracelog.domain.config import (
    PASSWORD_ENV_VAR,
    RetentionPolicy,
    load_settings,
    settings_to_dict,
    validate_settings,
)
from tracelog.domain.constants import DEFAULT_DAYS_TO_KEEP, DEFAULT_EMAIL_TEMPLATE
from tracelog.domain.exceptions import ConfigurationError
from tracelog.domain.levels import LogLevelMask


def test_defaults_without_input():
    settings, warnings = validate_settings({})

    assert warnings == []
    assert settings.level == LogLevelMask.INFO
    assert settings.log_dir is None
    assert settings.retention is None
    assert settings.days_to_keep == DEFAULT_DAYS_TO_KEEP
    assert settings.email is None


def test_retention_policy_from_log_dir():
    settings, _ = validate_settings({"log_dir": "/var/log/app", "days_to_keep": 3, "level": "TRACE"})

    assert settings.level == LogLevelMask.TRACE
    assert settings.retention == RetentionPolicy("/var/log/app", 3)


def test_lenient_coercion_collects_warnings():
    settings, warnings = validate_settings({"days_to_keep": "5", "max_bytes": -1, "level": "LOUD"})

    assert settings.days_to_keep == 5
    assert settings.max_bytes == 0
    assert settings.level == LogLevelMask.INFO
    assert len(warnings) == 3


def test_non_dict_input_falls_back_to_defaults():
    settings, warnings = validate_settings(["not", "a", "dict"])

    assert settings.level == LogLevelMask.INFO
    assert any("expected dict" in w for w in warnings)


def test_strict_mode_raises():
    with pytest.raises(ConfigurationError):
        validate_settings({"days_to_keep": "five"}, strict=True)

    with pytest.raises(ConfigurationError):
        validate_settings({"email": {"host": "smtp.example.com"}}, strict=True)


def test_email_section_builds_config():
    settings, warnings = validate_settings({
        "email": {
            "host": "smtp.example.com",
            "port": 2525,
            "username": "alerts@example.com",
            "password": "pw",
            "to": "ops@example.com, dev@example.com",
        }
    })

    email = settings.email
    assert email is not None
    assert email.port == 2525
    assert email.sender == "alerts@example.com"
    assert email.to == ("ops@example.com", "dev@example.com")
    assert email.template == DEFAULT_EMAIL_TEMPLATE
    assert settings.transport == "smtp"
    assert warnings == []


def test_email_without_recipients_is_disabled():
    settings, warnings = validate_settings({"email": {"host": "smtp.example.com"}})

    assert settings.email is None
    assert any("missing required keys: to" in w for w in warnings)


def test_http_transport_requires_relay_url():
    settings, warnings = validate_settings({"email": {"transport": "http", "to": ["ops@example.com"]}})

    assert settings.email is None
    assert any("relay_url" in w for w in warnings)


def test_password_from_environment(monkeypatch):
    monkeypatch.setenv(PASSWORD_ENV_VAR, "from-env")
    settings, _ = validate_settings({"email": {"host": "h", "to": ["a@example.com"], "username": "u"}})

    assert settings.email.password == "from-env"


def test_load_settings_from_file(tmp_path):
    path = tmp_path / "tracelog.json"
    path.write_text(json.dumps({"level": "WARN|ERROR", "log_dir": str(tmp_path / "logs")}), encoding="utf-8")

    settings = load_settings(str(path))

    assert settings.level == LogLevelMask.WARN | LogLevelMask.ERROR
    assert settings.log_dir == str(tmp_path / "logs")


def test_load_settings_missing_file_raises(tmp_path):
    with pytest.raises(ConfigurationError):
        load_settings(str(tmp_path / "missing.json"))


def test_load_settings_without_path_returns_defaults():
    assert load_settings(None).level == LogLevelMask.INFO


def test_settings_to_dict_masks_password():
    settings, _ = validate_settings({
        "email": {"host": "h", "to": ["a@example.com"], "username": "u", "password": "secret"}
    })
    data = settings_to_dict(settings)

    assert data["email"]["password"] == "***"
    assert data["level"] == 2
