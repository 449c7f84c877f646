"""Launcher preferences.

Read from ``preferences.json`` in the config directory, then overridden by
``CLIPLAUNCH_*`` environment variables (a ``.env`` file is honoured via
python-dotenv). The core only ever reads preferences.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from cliplaunch import paths
from cliplaunch.log_utils import parse_bool

logger = logging.getLogger(__name__)

DEFAULT_CLIPASTE_PATH = "clipaste"
DEFAULT_PNGPASTE_PATH = "pngpaste"

ENV_OVERRIDES: Dict[str, str] = {
    "clipaste_path": "CLIPLAUNCH_CLIPASTE_PATH",
    "default_output_dir": "CLIPLAUNCH_DEFAULT_OUTPUT_DIR",
    "enable_pngpaste": "CLIPLAUNCH_ENABLE_PNGPASTE",
    "pngpaste_path": "CLIPLAUNCH_PNGPASTE_PATH",
}


class Preferences(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    clipaste_path: str = DEFAULT_CLIPASTE_PATH
    default_output_dir: str | None = None
    enable_pngpaste: bool = False
    pngpaste_path: str = DEFAULT_PNGPASTE_PATH

    @field_validator("clipaste_path", mode="before")
    @classmethod
    def _blank_clipaste_path(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_CLIPASTE_PATH
        return value

    @field_validator("pngpaste_path", mode="before")
    @classmethod
    def _blank_pngpaste_path(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_PNGPASTE_PATH
        return value


def preferences_file() -> Path:
    return paths.preferences_path()


def _read_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable preferences file %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring preferences file %s: expected a JSON object", path)
        return {}
    return data


def _read_env() -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for field, env_name in ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if raw is None:
            continue
        values[field] = parse_bool(raw, False) if field == "enable_pngpaste" else raw
    return values


def load_preferences(path: Path | None = None, *, use_dotenv: bool = True) -> Preferences:
    """Merge defaults, the preferences file and environment overrides."""
    if use_dotenv:
        load_dotenv()
    merged = {**_read_file(path or preferences_file()), **_read_env()}
    try:
        return Preferences.model_validate(merged)
    except ValidationError as exc:
        logger.warning("Invalid preferences, using defaults: %s", exc)
        return Preferences()


def save_preferences(prefs: Preferences, path: Path | None = None) -> Path:
    target = path or preferences_file()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(prefs.model_dump(), indent=2), encoding="utf-8")
    return target
