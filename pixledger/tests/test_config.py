"""
Settings parsing.
"""

import pytest
from pydantic import ValidationError

from pixledger.app.core.config import Settings


def test_log_level_is_normalised():
    assert Settings(log_level="debug").log_level == "DEBUG"


def test_unknown_log_level_is_rejected():
    with pytest.raises(ValidationError):
        Settings(log_level="chatty")


def test_values_come_from_environment(monkeypatch):
    monkeypatch.setenv("DB_COMMAND_TIMEOUT", "5")
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "90")

    settings = Settings()

    assert settings.db_command_timeout == 5
    assert settings.access_token_expire_minutes == 90


def test_command_timeout_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(db_command_timeout=0)
