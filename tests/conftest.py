from __future__ import annotations

import stat
from pathlib import Path
from typing import Callable

import pytest


@pytest.fixture(autouse=True)
def _isolate_home(tmp_path_factory, monkeypatch):
    """Force tests to use a temporary HOME/XDG dirs and a clean CLIPLAUNCH_* environment."""
    base = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(base))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(base / ".config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(base / ".local" / "state"))
    monkeypatch.setenv("XDG_DATA_HOME", str(base / ".local" / "share"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(base / ".cache"))
    monkeypatch.setattr(Path, "home", lambda: base)
    for name in (
        "CLIPLAUNCH_CLIPASTE_PATH",
        "CLIPLAUNCH_DEFAULT_OUTPUT_DIR",
        "CLIPLAUNCH_ENABLE_PNGPASTE",
        "CLIPLAUNCH_PNGPASTE_PATH",
        "CLIPLAUNCH_LOG_DIR",
        "CLIPLAUNCH_LOG_LEVEL",
        "CLIPLAUNCH_LOG_JSON",
        "CLIPLAUNCH_LOG_STDERR",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_script(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write an executable /bin/sh stub and return its path."""

    def _make(name: str, body: str) -> Path:
        script = tmp_path / name
        script.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make
