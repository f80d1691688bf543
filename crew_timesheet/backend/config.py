from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any

from .errors import ConfigError
from .exporters.csv import SUMMARY_STYLES
from .exporters.report import ReportMode

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Environment variable per setting; env values override the JSON file.
_ENV_VARS = {
    "openai_model": "OPENAI_MODEL",
    "transcribe_model": "OPENAI_TRANSCRIBE_MODEL",
    "report_mode": "TIMESHEET_REPORT_MODE",
    "summary_style": "TIMESHEET_SUMMARY_STYLE",
    "port": "PORT",
    "log_level": "TIMESHEET_LOG_LEVEL",
}


@dataclass
class Settings:
    openai_model: str = "gpt-4o"
    transcribe_model: str = "whisper-1"
    report_mode: str = ReportMode.DETAILED.value
    summary_style: str = "worker"
    port: int = 3000
    log_level: str = "INFO"

    def validate(self) -> Settings:
        try:
            ReportMode(self.report_mode)
        except ValueError:
            raise ConfigError(f"Unknown report mode: {self.report_mode}") from None
        if self.summary_style not in SUMMARY_STYLES:
            raise ConfigError(f"Unknown summary style: {self.summary_style}")
        if not 0 < self.port < 65536:
            raise ConfigError(f"Port out of range: {self.port}")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigError(f"Unknown log level: {self.log_level}")
        return self


def load_settings_file(path: str) -> dict[str, Any]:
    """Read known settings keys from a JSON file."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a JSON object: {path}")
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(unknown))
    return {k: v for k, v in data.items() if k in known}


def load_settings(path: str | None = None, environ: dict[str, str] | None = None) -> Settings:
    """Load settings from TIMESHEET_CONFIG_PATH (or ``path``) and the environment.

    A missing config file is not an error; defaults apply.
    """
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    config_path = path or env.get("TIMESHEET_CONFIG_PATH")
    if config_path:
        if os.path.isfile(config_path):
            values.update(load_settings_file(config_path))
        else:
            logger.info("Config file %s not found; using defaults", config_path)
    for name, var in _ENV_VARS.items():
        if env.get(var):
            values[name] = env[var]
    if "port" in values:
        try:
            values["port"] = int(values["port"])
        except (TypeError, ValueError):
            raise ConfigError(f"Port must be an integer: {values['port']}") from None
    for name in ("report_mode", "summary_style", "log_level"):
        if name in values:
            values[name] = str(values[name]).strip().lower()
    if "log_level" in values:
        values["log_level"] = values["log_level"].upper()
    return replace(Settings(), **values).validate()


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
