from __future__ import annotations

import json
from pathlib import Path

import pytest

from cliplaunch.clipboard import ClipboardPreviewAdapter, ClipboardSnapshot
from cliplaunch.config import Preferences
from cliplaunch.errors import FormValidationError
from cliplaunch.execution import ExecutionPipeline, ExecutionStatus
from cliplaunch.form import FORM_KEY, FormValues
from cliplaunch.form_store import FormStore
from cliplaunch.image_dump import DumpUnavailable
from cliplaunch.recipes import Recipe, RecipeCatalog
from cliplaunch.session import LauncherSession


class StaticReader:
    def __init__(self) -> None:
        self.offsets: list[int] = []

    async def read(self, offset: int) -> ClipboardSnapshot:
        self.offsets.append(offset)
        return ClipboardSnapshot(text=f"entry {offset}")


def _session(tmp_path: Path, prefs: Preferences | None = None, reader=None) -> LauncherSession:
    return LauncherSession(
        store=FormStore(tmp_path / "forms.json"),
        prefs=prefs or Preferences(),
        catalog=RecipeCatalog([Recipe(id="loud", label="Loud", args=("--verbose",))]),
        pipeline=ExecutionPipeline(),
        clipboard=ClipboardPreviewAdapter(reader or StaticReader()),
    )


def test_edits_are_persisted_as_whole_records(tmp_path: Path):
    session = _session(tmp_path)
    session.update(mode="copy", text="hello")
    session.update(recipe_id="loud")

    reloaded = _session(tmp_path)
    assert reloaded.values == FormValues(mode="copy", text="hello", recipe_id="loud")
    assert reloaded.command().argv == ("--verbose", "copy", "hello")


def test_rejected_edit_leaves_form_untouched(tmp_path: Path):
    session = _session(tmp_path)
    session.update(mode="get")
    with pytest.raises(FormValidationError):
        session.update(mode="bogus")
    assert session.values.mode == "get"
    assert FormStore(tmp_path / "forms.json").load(FORM_KEY).mode == "get"


def test_reset(tmp_path: Path):
    session = _session(tmp_path)
    session.update(mode="ai", ai_action="classify")
    assert session.reset() == FormValues()
    assert FORM_KEY not in json.loads(session.store.path.read_text(encoding="utf-8"))
    assert not list(tmp_path.glob(".forms-*"))


def test_submission_uses_default_output_dir(tmp_path: Path):
    session = _session(tmp_path, Preferences(clipaste_path="/opt/clipaste", default_output_dir="/tmp/shots"))
    assert session.command().argv == ("paste",)
    assert session.submission().argv == ("paste", "--output", "/tmp/shots")
    assert session.submission().preview_line == "/opt/clipaste paste --output /tmp/shots"
    assert session.values.output is None


@pytest.mark.asyncio
async def test_submit_runs_stub(tmp_path: Path, make_script):
    stub = make_script("clipaste", 'printf "%s " "$@"')
    session = _session(tmp_path, Preferences(clipaste_path=str(stub)))
    session.update(mode="status", template_args="--json")

    result = await session.submit()

    assert result.status is ExecutionStatus.SUCCEEDED
    assert result.output.strip() == "status --json"
    assert session.last_command is not None
    assert session.last_command.argv == ("status", "--json")

    again = await session.run_again()
    assert again.generation == result.generation + 1


@pytest.mark.asyncio
async def test_clipboard_follows_offset(tmp_path: Path):
    reader = StaticReader()
    session = _session(tmp_path, reader=reader)
    assert (await session.preview_clipboard()).text == "entry 0"
    session.update(clip_offset=3)
    assert (await session.preview_clipboard()).text == "entry 3"
    assert reader.offsets == [0, 3]


@pytest.mark.asyncio
async def test_dump_uses_configured_helper(tmp_path: Path):
    session = _session(tmp_path, Preferences(enable_pngpaste=True, pngpaste_path=str(tmp_path / "missing")))
    result = await session.dump_clipboard_image()
    assert isinstance(result, DumpUnavailable)
    assert result.executable == str(tmp_path / "missing")
