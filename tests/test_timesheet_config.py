import json

import pytest

from crew_timesheet.backend.config import Settings, load_settings
from crew_timesheet.backend.errors import ConfigError


def test_defaults_without_environment():
    assert load_settings(environ={}) == Settings()


def test_environment_overrides():
    settings = load_settings(
        environ={
            "OPENAI_MODEL": "gpt-4o-mini",
            "PORT": "8080",
            "TIMESHEET_REPORT_MODE": "Compact",
            "TIMESHEET_LOG_LEVEL": "debug",
        }
    )
    assert settings.openai_model == "gpt-4o-mini"
    assert settings.port == 8080
    assert settings.report_mode == "compact"
    assert settings.log_level == "DEBUG"


def test_config_file_then_environment(tmp_path):
    path = tmp_path / "timesheet.json"
    path.write_text(json.dumps({"summary_style": "worker_date", "port": 5000, "theme": "dark"}))
    settings = load_settings(environ={"TIMESHEET_CONFIG_PATH": str(path), "PORT": "6000"})
    assert settings.summary_style == "worker_date"
    assert settings.port == 6000


def test_missing_config_file_uses_defaults(tmp_path):
    assert load_settings(str(tmp_path / "nope.json"), environ={}) == Settings()


def test_invalid_values_raise():
    with pytest.raises(ConfigError):
        load_settings(environ={"PORT": "abc"})
    with pytest.raises(ConfigError):
        load_settings(environ={"TIMESHEET_SUMMARY_STYLE": "weekly"})
    with pytest.raises(ConfigError):
        load_settings(environ={"TIMESHEET_REPORT_MODE": "verbose"})


def test_config_file_must_be_object(tmp_path):
    path = tmp_path / "timesheet.json"
    path.write_text("[1, 2]")
    with pytest.raises(ConfigError):
        load_settings(str(path), environ={})


def test_unknown_log_level_raises():
    with pytest.raises(ConfigError, match="log level"):
        load_settings(environ={"TIMESHEET_LOG_LEVEL": "verbose"})
