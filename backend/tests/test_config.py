# ruff: noqa: INP001
"""Settings validation for timezone, workday defaults and notification sink."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from workorders.core.config import Settings


def _settings(**values: object) -> Settings:
    return Settings(_env_file=None, **values)  # type: ignore[call-arg]


def test_defaults_are_valid() -> None:
    settings = _settings(environment="prod")
    assert settings.confirmation_token_ttl_days == 30
    assert settings.db_auto_migrate is False


def test_dev_environment_enables_auto_migrate() -> None:
    assert _settings(environment="dev").db_auto_migrate is True
    assert _settings(environment="dev", db_auto_migrate=False).db_auto_migrate is False


def test_unknown_timezone_is_rejected() -> None:
    with pytest.raises(ValidationError, match="IANA"):
        _settings(operational_timezone="Mars/Olympus_Mons")


@pytest.mark.parametrize("value", ["8:00", "24:00", "18:60", "evening"])
def test_malformed_workday_time_is_rejected(value: str) -> None:
    with pytest.raises(ValidationError, match="HH:MM"):
        _settings(default_workday_end_time=value)


def test_unknown_notification_sink_is_rejected() -> None:
    with pytest.raises(ValidationError, match="NOTIFICATION_SINK"):
        _settings(notification_sink="sms")
