"""Clipboard preview: read a clipboard history entry and summarise it for display."""

from __future__ import annotations

import asyncio
import logging
import re
from collections import deque
from dataclasses import dataclass
from pathlib import PurePath
from typing import Protocol

import pyperclip

from cliplaunch.form import MAX_CLIP_OFFSET
from cliplaunch.log_utils import log_event

logger = logging.getLogger(__name__)

TEXT_PREVIEW_LIMIT = 300
HTML_PREVIEW_LIMIT = 200
ELLIPSIS = "…"
NO_CLIPBOARD_DATA = "(no clipboard data)"
IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".webp", ".gif"})
DEFAULT_HISTORY_SIZE = MAX_CLIP_OFFSET + 1

_TAG_RE = re.compile(r"<[^>]*>")


@dataclass(frozen=True)
class ClipboardSnapshot:
    text: str | None = None
    file: str | None = None
    html: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.text or self.file or self.html)

    @property
    def has_image_file(self) -> bool:
        return bool(self.file) and is_image_file(self.file)  # type: ignore[arg-type]


class ClipboardReader(Protocol):
    async def read(self, offset: int) -> ClipboardSnapshot: ...


class PyperclipReader:
    """Text-only reader backed by pyperclip.

    The OS clipboard has no history, so this keeps the most recent distinct
    values seen on each read; offset 0 is always the live clipboard.
    """

    def __init__(self, history_size: int = DEFAULT_HISTORY_SIZE) -> None:
        self._history: deque[str] = deque(maxlen=history_size)

    async def read(self, offset: int) -> ClipboardSnapshot:
        try:
            current = await asyncio.to_thread(pyperclip.paste)
        except pyperclip.PyperclipException as exc:
            log_event(logger, "clipboard.unavailable", level=logging.WARNING, error=str(exc))
            return ClipboardSnapshot()

        if current and (not self._history or self._history[0] != current):
            self._history.appendleft(current)

        if offset < 0 or offset >= len(self._history):
            return ClipboardSnapshot()
        return ClipboardSnapshot(text=self._history[offset])


def copy_text(text: str) -> None:
    pyperclip.copy(text)


class ClipboardPreviewAdapter:
    """Fetches snapshots for the form's clipboard offset.

    Each fetch takes a generation number; a fetch that completes after a
    newer one was started returns None and does not replace the snapshot.
    """

    def __init__(self, reader: ClipboardReader) -> None:
        self._reader = reader
        self._generation = 0
        self._offset = 0
        self._snapshot: ClipboardSnapshot | None = None

    @property
    def snapshot(self) -> ClipboardSnapshot | None:
        return self._snapshot

    @property
    def offset(self) -> int:
        return self._offset

    async def preview(self, offset: int) -> ClipboardSnapshot | None:
        self._generation += 1
        generation = self._generation
        self._offset = offset

        snapshot = await self._reader.read(offset)
        if generation != self._generation:
            log_event(logger, "clipboard.stale_read", level=logging.DEBUG, offset=offset)
            return None

        self._snapshot = snapshot
        log_event(logger, "clipboard.read", level=logging.DEBUG, offset=offset, empty=snapshot.is_empty)
        return snapshot

    async def refresh(self) -> ClipboardSnapshot | None:
        return await self.preview(self._offset)


def truncate(text: str, limit: int) -> str:
    return text[:limit] + ELLIPSIS if len(text) > limit else text


def strip_tags(html: str) -> str:
    return _TAG_RE.sub("", html)


def is_image_file(path: str) -> bool:
    return PurePath(path).suffix.lower() in IMAGE_EXTENSIONS


def render_preview_text(snapshot: ClipboardSnapshot | None) -> str:
    """Short form-level summary of a snapshot."""
    if snapshot is None or snapshot.is_empty:
        return NO_CLIPBOARD_DATA
    parts: list[str] = []
    if snapshot.text:
        parts.append(truncate(snapshot.text, TEXT_PREVIEW_LIMIT))
    if snapshot.file:
        parts.append(f"File: {snapshot.file}")
    if snapshot.html:
        parts.append(f"HTML: {truncate(strip_tags(snapshot.html), HTML_PREVIEW_LIMIT)}")
    return "\n\n".join(parts)
