"""Dump a clipboard image to a temporary PNG using an optional helper (pngpaste).

The helper is optional, so the outcome distinguishes "not installed" from
"installed but the dump failed":

- ``DumpUnavailable``: the helper could not be found; nothing was run.
- ``DumpFailed``: the helper ran and exited non-zero or produced nothing.
- ``DumpSaved``: the image was written to ``path``.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from cliplaunch.log_utils import log_event

logger = logging.getLogger(__name__)

INSTALL_HINT = "brew install pngpaste"
TEMP_PREFIX = "cliplaunch-preview-"
DUMP_TIMEOUT = 10.0


@dataclass(frozen=True)
class DumpUnavailable:
    executable: str
    install_hint: str = INSTALL_HINT


@dataclass(frozen=True)
class DumpFailed:
    reason: str
    returncode: int | None = None


@dataclass(frozen=True)
class DumpSaved:
    path: str


DumpResult = Union[DumpUnavailable, DumpFailed, DumpSaved]


def probe_executable(executable: str) -> str | None:
    """Resolve ``executable`` to a runnable path, or None."""
    candidate = Path(executable).expanduser()
    if candidate.parent != Path(".") or os.sep in executable:
        if candidate.is_file() and os.access(candidate, os.X_OK):
            return str(candidate)
        return None
    return shutil.which(executable)


def _temp_target() -> str:
    fd, name = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=".png")
    os.close(fd)
    return name


def _discard(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass


async def dump_image(executable: str, *, timeout: float | None = DUMP_TIMEOUT) -> DumpResult:
    """Probe for the helper, then ask it to write the clipboard image to a temp file.

    The temp file is removed on every outcome except ``DumpSaved``,
    including a timeout or cancellation of the awaiting task.
    """
    resolved = probe_executable(executable)
    if resolved is None:
        log_event(logger, "image_dump.unavailable", executable=executable)
        return DumpUnavailable(executable=executable)

    target = _temp_target()
    saved = False
    try:
        try:
            proc = await asyncio.create_subprocess_exec(
                resolved,
                target,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            log_event(logger, "image_dump.spawn_failed", level=logging.WARNING, executable=resolved, error=str(exc))
            return DumpFailed(reason=f"Failed to start {resolved}: {exc}")

        try:
            _, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.communicate()
            log_event(logger, "image_dump.timeout", level=logging.WARNING, executable=resolved, timeout=timeout)
            return DumpFailed(reason=f"{resolved} timed out after {timeout}s")
        except asyncio.CancelledError:
            proc.kill()
            raise

        if proc.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            log_event(logger, "image_dump.failed", level=logging.WARNING, returncode=proc.returncode, stderr=detail)
            return DumpFailed(reason=detail or "Could not dump clipboard image", returncode=proc.returncode)

        target_path = Path(target)
        if not target_path.exists() or target_path.stat().st_size == 0:
            log_event(logger, "image_dump.empty", level=logging.WARNING, path=target)
            return DumpFailed(reason="Clipboard image dump produced no data", returncode=proc.returncode)

        saved = True
        log_event(logger, "image_dump.saved", path=target)
        return DumpSaved(path=target)
    finally:
        if not saved:
            _discard(target)
