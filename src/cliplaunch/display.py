"""Rich renderers for the form, command results and clipboard views."""

from __future__ import annotations

from io import StringIO
from threading import Lock
from typing import Any

from prompt_toolkit.formatted_text import ANSI  # type: ignore
from prompt_toolkit.shortcuts import print_formatted_text  # type: ignore
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table
from rich.text import Text

from cliplaunch.clipboard import ClipboardSnapshot, is_image_file, render_preview_text
from cliplaunch.execution import NOTIFY_SUCCESS, ExecutionResult, ExecutionStatus
from cliplaunch.form import FormValues
from cliplaunch.image_dump import DumpFailed, DumpResult, DumpSaved, DumpUnavailable
from cliplaunch.synth import SynthesizedCommand

NO_OUTPUT = "(no output)"
FENCE = "```"

_render_buffer = StringIO()
_render_console = Console(
    file=_render_buffer,
    force_terminal=True,
    color_system="standard",
    markup=False,
    highlight=False,
)
_render_lock = Lock()


def _render_and_print(*args: Any, **kwargs: Any) -> None:
    """Render rich output to ANSI text, then print it through prompt_toolkit.

    Going through ``print_formatted_text`` keeps output from tearing the
    prompt while a ``PromptSession`` is active.
    """
    kwargs.setdefault("end", "\n")
    with _render_lock:
        _render_buffer.seek(0)
        _render_buffer.truncate(0)
        _render_console.print(*args, **kwargs)
        output = _render_buffer.getvalue()
    if output:
        print_formatted_text(ANSI(output), end="")


def result_heading(status: ExecutionStatus) -> str:
    """Heading for the result view; anything not finished reads as running."""
    if status is ExecutionStatus.SUCCEEDED:
        return "✅ Done"
    if status is ExecutionStatus.FAILED:
        return "❌ Error"
    return "Running clipaste…"


def render_result_markdown(command: SynthesizedCommand, result: ExecutionResult | None) -> str:
    """Markdown for a run: heading, the command as run, its output and any error.

    ``result`` is None while the process is still running.
    """
    status = result.status if result is not None else ExecutionStatus.RUNNING
    output = (result.output if result is not None else "").strip() or NO_OUTPUT
    lines = [
        f"# {result_heading(status)}",
        "",
        f"{FENCE}bash",
        command.display,
        FENCE,
        "",
        "## Output",
        "",
        FENCE,
        output,
        FENCE,
    ]
    if result is not None and result.error is not None:
        lines.extend(["", "## Error", "", FENCE, result.error.message, FENCE])
    return "\n".join(lines)


def render_clipboard_markdown(snapshot: ClipboardSnapshot | None) -> str:
    """Full clipboard detail view, untruncated, unlike the one-line form preview."""
    lines = ["# Clipboard Preview", ""]
    if snapshot is None or snapshot.is_empty:
        lines.append("(no clipboard data)")
        return "\n".join(lines)
    if snapshot.text:
        lines.extend(["## Text", "", FENCE, snapshot.text, FENCE, ""])
    if snapshot.file:
        lines.extend(["## File", "", f"`{snapshot.file}`", ""])
        if is_image_file(snapshot.file):
            lines.extend([f"![clipboard-image]({snapshot.file})", ""])
    if snapshot.html:
        lines.extend(["## HTML (raw)", "", f"{FENCE}html", snapshot.html, FENCE, ""])
    return "\n".join(lines).rstrip() + "\n"


def render_dump_markdown(result: DumpResult) -> str:
    """Markdown for a pngpaste attempt: install help, a failure note or the saved image."""
    lines = ["# pngpaste Preview", ""]
    if isinstance(result, DumpUnavailable):
        lines.extend(
            [
                f"`{result.executable}` not found.",
                "",
                "Install with:",
                "",
                f"{FENCE}bash",
                result.install_hint,
                FENCE,
            ]
        )
    elif isinstance(result, DumpFailed):
        lines.append(
            "Could not dump clipboard image via pngpaste. Make sure the clipboard holds an image."
        )
        if result.reason:
            lines.extend(["", f"Details: {result.reason}"])
    elif isinstance(result, DumpSaved):
        lines.extend([f"Saved to `{result.path}`.", "", f"![clipboard-image]({result.path})"])
    return "\n".join(lines)


def form_table(values: FormValues, command: SynthesizedCommand, clip_snapshot: ClipboardSnapshot | None) -> Table:
    """Two-column table of the fields that are set, plus clipboard and command rows."""
    table = Table(show_header=False, box=None, border_style="cyan")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    for name, value in values.model_dump().items():
        if value in (None, "", (), False) and name not in {"mode", "clip_offset"}:
            continue
        table.add_row(name, str(list(value)) if isinstance(value, tuple) else str(value))
    table.add_row("clipboard", render_preview_text(clip_snapshot))
    table.add_row("command", command.display)
    return table


def print_form(values: FormValues, command: SynthesizedCommand, clip_snapshot: ClipboardSnapshot | None) -> None:
    _render_and_print(form_table(values, command, clip_snapshot))


def print_markdown(markdown: str) -> None:
    """Print markdown produced by the ``render_*`` helpers."""
    _render_and_print(Markdown(markdown))


def print_command(command: SynthesizedCommand) -> None:
    _render_and_print(Text(command.display, style="bold"))


def print_notice(kind: str, title: str, message: str) -> None:
    """Transient one-line notification used as the execution notifier."""
    if kind == NOTIFY_SUCCESS:
        _render_and_print(Text(f"✅ {title}", style="green"))
        return
    text = f"{title}: {message}" if message else title
    _render_and_print(Text(text, style="red"))


def print_info(message: str) -> None:
    """Bracketed status lines from slash commands, such as ``[command copied]``."""
    _render_and_print(Text(message, style="magenta"))
