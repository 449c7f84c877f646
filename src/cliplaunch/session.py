"""Launcher session: the form record plus the collaborators that act on it."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from cliplaunch.clipboard import ClipboardPreviewAdapter, ClipboardSnapshot
from cliplaunch.config import Preferences
from cliplaunch.execution import ExecutionPipeline, ExecutionResult
from cliplaunch.form import FORM_KEY, FormValues, update_form
from cliplaunch.form_store import FormStore
from cliplaunch.image_dump import DumpResult, dump_image
from cliplaunch.log_utils import log_context, log_event
from cliplaunch.recipes import RecipeCatalog
from cliplaunch.synth import SynthesizedCommand, prepare_submission, synthesize

logger = logging.getLogger(__name__)


@dataclass
class LauncherSession:
    store: FormStore
    prefs: Preferences
    catalog: RecipeCatalog
    pipeline: ExecutionPipeline
    clipboard: ClipboardPreviewAdapter
    key: str = FORM_KEY
    values: FormValues = field(init=False)
    last_command: SynthesizedCommand | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.values = self.store.load(self.key)

    def update(self, **patch: Any) -> FormValues:
        """Replace the form with ``patch`` applied and persist it."""
        new_values = update_form(self.values, patch)
        self.store.save(self.key, new_values)
        self.values = new_values
        log_event(logger, "form.updated", level=logging.DEBUG, fields=sorted(patch))
        return new_values

    def reset(self) -> FormValues:
        """Forget the stored record and start over from the defaults."""
        self.store.clear(self.key)
        self.values = self.store.load(self.key)
        log_event(logger, "form.reset", key=self.key)
        return self.values

    def command(self) -> SynthesizedCommand:
        """Command preview for the form exactly as stored."""
        return synthesize(self.values, self.catalog, self.prefs.clipaste_path)

    def submission(self) -> SynthesizedCommand:
        """Command that a submit would run (preferences folded in)."""
        return synthesize(prepare_submission(self.values, self.prefs), self.catalog, self.prefs.clipaste_path)

    async def submit(self) -> ExecutionResult:
        command = self.submission()
        self.last_command = command
        with log_context(mode=self.values.mode):
            return await self.pipeline.execute(command.program, command.argv)

    async def run_again(self) -> ExecutionResult:
        return await self.pipeline.run_again()

    async def preview_clipboard(self) -> ClipboardSnapshot | None:
        return await self.clipboard.preview(self.values.clip_offset)

    async def dump_clipboard_image(self) -> DumpResult:
        return await dump_image(self.prefs.pngpaste_path)
