from __future__ import annotations

import os
import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Final, Optional

import json5  # type: ignore
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from codexpreview.errors import SettingsError

# Default delay between two terminal buffer polls.
POLL_INTERVAL_DEFAULT: Final[float] = 1.5

# Top-level key holding monitor settings in a shared config file.
SETTINGS_KEY: Final[str] = "preview"

# Variable replacement pattern.
# Supports:
#   - ${NAME}
#   - ${env:NAME}
# Ignores '$${NAME}' so it can be used to escape a literal '${NAME}'.
VAR_PATTERN = re.compile(r"(?<!\$)\$\{(?:env:)?([A-Za-z_][A-Za-z0-9_]*)\}")


class LogLevel(str, Enum):
    debug = "debug"
    info = "info"
    warning = "warning"
    error = "error"
    critical = "critical"


class MonitorSettings(BaseModel):
    """
    Settings for the terminal preview monitor.

    - poll_interval: seconds between buffer polls
    - show_diff_on_change: master switch; when off, polling does nothing
    - strict_context: fail the full-file reconstruction on any context mismatch
    - project_root: directory preview paths are resolved against
    """

    poll_interval: float = Field(default=POLL_INTERVAL_DEFAULT, gt=0)
    show_diff_on_change: bool = True
    strict_context: bool = False
    project_root: Optional[Path] = None
    log_level: LogLevel = LogLevel.info

    @field_validator("project_root", mode="before")
    @classmethod
    def _expand_root(cls, v):
        if isinstance(v, str) and v:
            return Path(v).expanduser()
        return v


def _expand_vars(value: Any) -> Any:
    if isinstance(value, str):

        def _sub(m: re.Match[str]) -> str:
            name = m.group(1)
            if name not in os.environ:
                raise SettingsError(f"Environment variable is not set: {name}")
            return os.environ[name]

        return VAR_PATTERN.sub(_sub, value).replace("$${", "${")
    if isinstance(value, dict):
        return {k: _expand_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_vars(v) for v in value]
    return value


def _read_document(path: Path) -> Dict[str, Any]:
    suffix = path.suffix.lower()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SettingsError(f"Cannot read settings file {path}: {exc}") from exc

    if suffix in (".yaml", ".yml"):
        loads = yaml.safe_load
    elif suffix in (".json", ".json5"):
        loads = json5.loads
    else:
        raise SettingsError(f"Unsupported settings file type: {path.name}")

    try:
        doc = loads(text)
    except (yaml.YAMLError, ValueError) as exc:
        raise SettingsError(f"Invalid settings file {path}: {exc}") from exc

    if doc is None:
        return {}
    if not isinstance(doc, dict):
        raise SettingsError(f"Settings file {path} must contain a mapping")
    return doc


def load_settings(path: Optional[Path] = None) -> MonitorSettings:
    """
    Load monitor settings from a YAML or JSON5 file.

    Settings may live under a top-level "preview" key or at the top level.
    Returns defaults when path is None.
    """
    if path is None:
        return MonitorSettings()

    doc = _read_document(path)
    section = doc.get(SETTINGS_KEY, doc)
    if not isinstance(section, dict):
        raise SettingsError(f"'{SETTINGS_KEY}' in {path} must be a mapping")

    try:
        return MonitorSettings.model_validate(_expand_vars(section))
    except ValidationError as exc:
        raise SettingsError(f"Invalid settings in {path}: {exc}") from exc
