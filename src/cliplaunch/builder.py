"""Mode argument builder: project a form record onto clipaste arguments.

The builder is total. Missing optional fields produce fewer flags and
blank required input (e.g. nothing to copy) is left for clipaste itself to
report.
"""

from __future__ import annotations

from typing import Callable

from cliplaunch.form import FormValues, is_blank

DEFAULT_AI_ACTION = "summarize"


def _copy_args(values: FormValues) -> list[str]:
    args = ["copy"]
    if values.file:
        args.extend(["--file", values.file[0]])
    elif not is_blank(values.text):
        args.append(values.text)  # type: ignore[arg-type]
    return args


def _get_args(values: FormValues) -> list[str]:
    args = ["get"]
    if values.raw:
        args.append("--raw")
    return args


def _paste_args(values: FormValues) -> list[str]:
    args = ["paste"]
    if not is_blank(values.output):
        args.extend(["--output", values.output])  # type: ignore[list-item]
    if not is_blank(values.filename):
        args.extend(["--filename", values.filename])  # type: ignore[list-item]
    if values.type and values.type != "auto":
        args.extend(["--type", values.type])
    if values.format:
        args.extend(["--format", values.format])
    if not is_blank(values.quality):
        args.extend(["--quality", values.quality])  # type: ignore[list-item]
    if values.auto_extension:
        args.append("--auto-extension")
    if values.dry_run:
        args.append("--dry-run")
    return args


def _status_args(values: FormValues) -> list[str]:
    return ["status"]


def _clear_args(values: FormValues) -> list[str]:
    # Only reachable from an explicit submit, so confirmation is always passed.
    return ["clear", "--confirm"]


def _ai_args(values: FormValues) -> list[str]:
    action = values.ai_action or DEFAULT_AI_ACTION
    args = ["ai", action]
    if action == "classify" and not is_blank(values.ai_labels):
        args.extend(["--labels", values.ai_labels])  # type: ignore[list-item]
    if action == "transform" and not is_blank(values.ai_instruction):
        args.extend(["--instruction", values.ai_instruction])  # type: ignore[list-item]
    return args


MODE_BUILDERS: dict[str, Callable[[FormValues], list[str]]] = {
    "copy": _copy_args,
    "get": _get_args,
    "paste": _paste_args,
    "status": _status_args,
    "clear": _clear_args,
    "ai": _ai_args,
}


def build_mode_args(values: FormValues) -> list[str]:
    """Return the argument list for the record's active mode."""
    return MODE_BUILDERS[values.mode](values)
