"""
Tests for engine settings and logging setup.
"""

import logging

import pytest
from pydantic import ValidationError
from qlogic.config import EngineSettings, get_settings
from qlogic.log import setup_logging


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("QLOGIC_LOG_LEVEL", "QLOGIC_STRICT_STRUCTURE_CHECK",
                 "QLOGIC_DEFAULT_MINUTES_PER_SECTION", "QLOGIC_DATA_DIR"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults():
    settings = EngineSettings()
    assert settings.log_level == "INFO"
    assert settings.strict_structure_check is True
    assert settings.default_minutes_per_section == 5
    assert settings.data_dir == "./data"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("QLOGIC_STRICT_STRUCTURE_CHECK", "false")
    monkeypatch.setenv("QLOGIC_DEFAULT_MINUTES_PER_SECTION", "8")
    monkeypatch.setenv("QLOGIC_LOG_LEVEL", "DEBUG")
    settings = EngineSettings()
    assert settings.strict_structure_check is False
    assert settings.default_minutes_per_section == 8
    assert settings.log_level == "DEBUG"


def test_minutes_must_be_positive(monkeypatch):
    monkeypatch.setenv("QLOGIC_DEFAULT_MINUTES_PER_SECTION", "0")
    with pytest.raises(ValidationError):
        EngineSettings()


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_setup_logging_adds_one_handler(monkeypatch):
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", root.level)
    setup_logging("debug")
    setup_logging("debug")
    assert len(root.handlers) == 1
    assert root.level == logging.DEBUG
