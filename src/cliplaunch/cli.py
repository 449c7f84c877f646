"""Command-line entry point and interactive form shell."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from typing import Sequence

from prompt_toolkit import PromptSession  # type: ignore
from prompt_toolkit.key_binding import KeyBindings  # type: ignore

from cliplaunch import display
from cliplaunch.clipboard import ClipboardPreviewAdapter, PyperclipReader, render_preview_text
from cliplaunch.config import load_preferences, preferences_file, save_preferences
from cliplaunch.execution import ExecutionPipeline, ExecutionStatus
from cliplaunch.form_store import FormStore
from cliplaunch.log_utils import build_log_config, configure_logging, log_event
from cliplaunch.recipes import load_catalog
from cliplaunch.session import LauncherSession
from cliplaunch.slash import handle_slash_command

logger = logging.getLogger(__name__)

CANCEL_TOKEN = "__CANCEL__"


def build_session(*, store: FormStore | None = None) -> LauncherSession:
    prefs = load_preferences()
    return LauncherSession(
        store=store or FormStore(),
        prefs=prefs,
        catalog=load_catalog(),
        pipeline=ExecutionPipeline(notifier=display.print_notice),
        clipboard=ClipboardPreviewAdapter(PyperclipReader()),
    )


async def interactive_loop(session: LauncherSession) -> None:
    """Prompt for slash commands until exit; every edit is persisted immediately."""
    kb = KeyBindings()

    @kb.add("escape")
    def _(event):  # type: ignore
        if not event.app.is_done:
            event.app.exit(result=CANCEL_TOKEN)

    prompt_session: PromptSession = PromptSession(key_bindings=kb)
    snapshot = await session.preview_clipboard()
    display.print_form(session.values, session.command(), snapshot)
    print("Send /help for help, /run to execute.")

    while True:
        try:
            line = await prompt_session.prompt_async(f"📋 {session.values.mode}> ")
        except EOFError:
            break
        except KeyboardInterrupt:
            print("", file=sys.stderr)
            continue

        if line == CANCEL_TOKEN:
            print("[cancelled]")
            continue
        line = line.strip()
        if not line:
            continue
        if line.lower() in {"exit", "quit"}:
            break
        if line.startswith("/") and await handle_slash_command(line, session):
            continue
        display.print_info(f"[unknown command: {line}; send /help]")

    log_event(logger, "shell.exit", mode=session.values.mode)


async def run_once(session: LauncherSession) -> int:
    command = session.submission()
    result = await session.submit()
    display.print_markdown(display.render_result_markdown(command, result))
    return 0 if result.status is ExecutionStatus.SUCCEEDED else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cliplaunch",
        description="Compose, preview and run clipaste commands from a saved form.",
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--run", action="store_true", help="Run the saved form once and exit.")
    group.add_argument(
        "--print-command", action="store_true", help="Print the command preview for the saved form and exit."
    )
    group.add_argument(
        "--clipboard", action="store_true", help="Print the clipboard preview for the saved offset and exit."
    )
    group.add_argument(
        "--init-config", action="store_true", help="Write a preferences file with the current settings."
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Mirror log records to stderr.")
    return parser


async def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    log_config = build_log_config(default_level=logging.DEBUG if args.verbose else logging.INFO)
    if args.verbose:
        log_config = dataclasses.replace(log_config, stderr=True)
    configure_logging(log_config)

    if args.init_config:
        target = preferences_file()
        if target.exists():
            print(f"Preferences already exist at {target}")
            return 0
        print(f"Wrote {save_preferences(load_preferences(), target)}")
        return 0

    session = build_session()
    if args.print_command:
        print(session.command().display)
        return 0
    if args.clipboard:
        print(render_preview_text(await session.preview_clipboard()))
        return 0
    if args.run:
        return await run_once(session)

    await interactive_loop(session)
    return 0


def main_entry() -> int:
    try:
        return asyncio.run(main())
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main_entry())
