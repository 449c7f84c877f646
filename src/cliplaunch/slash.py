"""Slash command registry and dispatch for the interactive form shell."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from prompt_toolkit.shortcuts import radiolist_dialog  # type: ignore

from cliplaunch import display
from cliplaunch.clipboard import copy_text, render_preview_text
from cliplaunch.errors import CliplaunchError, FormValidationError
from cliplaunch.form import FIELD_NAMES, MAX_CLIP_OFFSET, MODES, FormValues
from cliplaunch.image_dump import DumpUnavailable
from cliplaunch.session import LauncherSession

logger = logging.getLogger(__name__)

SlashHandler = Callable[[LauncherSession, str], Awaitable[bool] | bool]


@dataclass
class SlashCommandDef:
    description: str
    hint: str
    handler: SlashHandler


SLASH_HANDLERS: dict[str, SlashCommandDef] = {}


def register_slash_command(
    name: str, description: str, hint: str
) -> Callable[[SlashHandler], SlashHandler]:
    """Decorator to register a slash command."""

    def _decorator(func: SlashHandler) -> SlashHandler:
        SLASH_HANDLERS[name] = SlashCommandDef(description=description, hint=hint, handler=func)
        return func

    return _decorator


def _apply(session: LauncherSession, **patch: object) -> bool:
    """Apply a form edit and echo the new command; False when the edit is rejected."""
    try:
        session.update(**patch)
    except FormValidationError as exc:
        display.print_info(f"[invalid value: {exc}]")
        return False
    display.print_command(session.command())
    return True


async def select_mode(current: str, selection_fallback: str | None = None) -> str | None:
    if selection_fallback is not None:
        return selection_fallback
    dialog = radiolist_dialog(
        title="Select mode",
        text=f"Current: {current}",
        values=[(mode, mode if mode != "ai" else "ai (optional)") for mode in MODES],
    )
    return await dialog.run_async()


def coerce_field_value(field: str, raw: str) -> object:
    """Turn the text typed after ``/set <field>`` into a form value."""
    if field == "file":
        return (raw,) if raw else ()
    return raw


@register_slash_command("/help", description="Show available slash commands.", hint="/help")
def _handle_help(session: LauncherSession, argument: str) -> bool:
    print("Available slash commands:")
    for entry in SLASH_HANDLERS.values():
        print(f"{entry.hint:<22} - {entry.description}")
    print(f"Fields: {', '.join(FIELD_NAMES)}")
    return True


@register_slash_command("/show", description="Show the form, clipboard preview and command.", hint="/show")
async def _handle_show(session: LauncherSession, argument: str) -> bool:
    snapshot = await session.preview_clipboard()
    display.print_form(session.values, session.command(), snapshot or session.clipboard.snapshot)
    return True


@register_slash_command("/mode", description="Pick the clipaste mode.", hint="/mode [name]")
async def _handle_mode(session: LauncherSession, argument: str) -> bool:
    requested = argument.strip()
    if not requested:
        try:
            requested = await select_mode(session.values.mode) or ""
        except Exception as exc:  # pragma: no cover - dialog failures
            display.print_info(f"[failed to open mode selector: {exc}]")
            return True
        if not requested:
            return True
    if requested not in MODES:
        display.print_info(f"[unknown mode: {requested}; available: {', '.join(MODES)}]")
        return True
    return _apply(session, mode=requested)


@register_slash_command("/set", description="Set a form field.", hint="/set <field> <value>")
def _handle_set(session: LauncherSession, argument: str) -> bool:
    field, _, raw = argument.strip().partition(" ")
    if not field:
        display.print_info("[usage: /set <field> <value>]")
        return True
    return _apply(session, **{field: coerce_field_value(field, raw.strip())})


@register_slash_command("/unset", description="Reset a form field to its default.", hint="/unset <field>")
def _handle_unset(session: LauncherSession, argument: str) -> bool:
    field = argument.strip()
    if field not in FormValues.model_fields:
        display.print_info(f"[unknown field: {field or '<none>'}]")
        return True
    return _apply(session, **{field: FormValues.model_fields[field].get_default()})


@register_slash_command("/recipe", description="Pick a recipe, or 'none' to clear it.", hint="/recipe [id|none]")
def _handle_recipe(session: LauncherSession, argument: str) -> bool:
    requested = argument.strip()
    if not requested:
        current = session.values.recipe_id or "none"
        print(f"Current recipe: {current}")
        for recipe in session.catalog.all():
            print(f"  {recipe.id:<16} {recipe.label}  ({' '.join(recipe.args)})")
        return True
    if requested == "none":
        return _apply(session, recipe_id=None)
    if requested not in session.catalog:
        display.print_info(f"[unknown recipe: {requested}]")
        return True
    return _apply(session, recipe_id=requested)


@register_slash_command("/args", description="Set free-text extra arguments.", hint="/args <text>")
def _handle_args(session: LauncherSession, argument: str) -> bool:
    return _apply(session, template_args=argument.strip() or None)


@register_slash_command(
    "/offset", description="Choose the clipboard history entry to preview.", hint=f"/offset <0-{MAX_CLIP_OFFSET}>"
)
async def _handle_offset(session: LauncherSession, argument: str) -> bool:
    if not _apply(session, clip_offset=argument.strip() or 0):
        return True
    snapshot = await session.preview_clipboard()
    if snapshot is not None:
        print(render_preview_text(snapshot))
    return True


@register_slash_command("/preview", description="Show the command preview.", hint="/preview")
def _handle_preview(session: LauncherSession, argument: str) -> bool:
    display.print_command(session.command())
    return True


@register_slash_command("/copy", description="Copy the command preview to the clipboard.", hint="/copy")
def _handle_copy(session: LauncherSession, argument: str) -> bool:
    command = session.command()
    copy_text(command.display)
    display.print_info("[command copied]")
    return True


@register_slash_command("/run", description="Run clipaste with the current form.", hint="/run")
async def _handle_run(session: LauncherSession, argument: str) -> bool:
    command = session.submission()
    display.print_markdown(display.render_result_markdown(command, None))
    result = await session.submit()
    display.print_markdown(display.render_result_markdown(command, result))
    return True


@register_slash_command("/again", description="Run the last command again.", hint="/again")
async def _handle_again(session: LauncherSession, argument: str) -> bool:
    try:
        result = await session.run_again()
    except CliplaunchError as exc:
        display.print_info(f"[{exc}]")
        return True
    command = session.last_command
    if command is not None:
        display.print_markdown(display.render_result_markdown(command, result))
    return True


@register_slash_command("/clip", description="Show the full clipboard entry.", hint="/clip")
async def _handle_clip(session: LauncherSession, argument: str) -> bool:
    snapshot = await session.preview_clipboard()
    if snapshot is not None:
        display.print_markdown(display.render_clipboard_markdown(snapshot))
    return True


@register_slash_command("/png", description="Dump a clipboard image with pngpaste.", hint="/png")
async def _handle_png(session: LauncherSession, argument: str) -> bool:
    if not session.prefs.enable_pngpaste:
        display.print_info("[pngpaste preview is disabled; set CLIPLAUNCH_ENABLE_PNGPASTE=1]")
        return True
    result = await session.dump_clipboard_image()
    if isinstance(result, DumpUnavailable):
        logger.info("pngpaste not available at %s", result.executable)
    display.print_markdown(display.render_dump_markdown(result))
    return True


@register_slash_command("/reset", description="Reset the form to its defaults.", hint="/reset")
def _handle_reset(session: LauncherSession, argument: str) -> bool:
    session.reset()
    display.print_command(session.command())
    return True


async def handle_slash_command(line: str, session: LauncherSession) -> bool:
    """Dispatch ``line`` to a registered handler; False when no handler matches."""
    name, _, argument = line.strip().partition(" ")
    entry = SLASH_HANDLERS.get(name)
    if entry is None:
        return False
    result = entry.handler(session, argument)
    if inspect.isawaitable(result):
        await result
    return True
