"""Where cliplaunch keeps its files.

Preferences and user recipes are configuration; the saved form is state;
logs go to the platform log directory. All locations come from platformdirs.
"""

from __future__ import annotations

from pathlib import Path

from platformdirs import PlatformDirs

APP_NAME = "cliplaunch"

PREFERENCES_FILE_NAME = "preferences.json"
RECIPES_FILE_NAME = "recipes.json"
FORMS_FILE_NAME = "forms.json"


def _dirs() -> PlatformDirs:
    """Platform directories without an author component (``~/.config/cliplaunch`` on Linux)."""
    return PlatformDirs(appname=APP_NAME, appauthor=False)


def _created(path: Path) -> Path:
    """Create ``path`` if needed so callers can write into it straight away."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def config_dir() -> Path:
    """User-edited settings: preferences and recipes."""
    return _created(_dirs().user_config_path)


def state_dir() -> Path:
    """Data the launcher writes itself, such as the saved form."""
    return _created(_dirs().user_state_path)


def log_dir() -> Path:
    """Home of ``cliplaunch.log`` unless ``CLIPLAUNCH_LOG_DIR`` says otherwise."""
    return _created(_dirs().user_log_path)


def preferences_path() -> Path:
    return config_dir() / PREFERENCES_FILE_NAME


def recipes_path() -> Path:
    return config_dir() / RECIPES_FILE_NAME


def forms_path() -> Path:
    """JSON document holding every saved form, keyed by form id."""
    return state_dir() / FORMS_FILE_NAME
