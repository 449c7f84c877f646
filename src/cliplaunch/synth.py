"""Command synthesis: recipe args, then mode args, then free-text args."""

from __future__ import annotations

from dataclasses import dataclass

from cliplaunch.builder import build_mode_args
from cliplaunch.config import Preferences
from cliplaunch.form import FormValues, is_blank, update_form
from cliplaunch.recipes import RecipeCatalog
from cliplaunch.tokens import join_for_display, tokenize


@dataclass(frozen=True)
class SynthesizedCommand:
    program: str
    argv: tuple[str, ...]
    preview_line: str

    @property
    def display(self) -> str:
        """Preview line as shown to the user, with a prompt marker."""
        return f"$ {self.preview_line}"


def synthesize_argv(values: FormValues, catalog: RecipeCatalog) -> list[str]:
    argv: list[str] = []
    recipe = catalog.lookup(values.recipe_id)
    if recipe is not None:
        argv.extend(recipe.args)
    argv.extend(build_mode_args(values))
    argv.extend(tokenize(values.template_args))
    return argv


def synthesize(values: FormValues, catalog: RecipeCatalog, program: str) -> SynthesizedCommand:
    """Derive the argument vector and its advisory preview line.

    Always recomputed from ``values``; nothing is cached between edits.
    """
    argv = synthesize_argv(values, catalog)
    return SynthesizedCommand(
        program=program,
        argv=tuple(argv),
        preview_line=join_for_display(program, argv),
    )


def prepare_submission(values: FormValues, prefs: Preferences) -> FormValues:
    """Fill a blank output directory from preferences for a submit.

    The returned record is only used for this run; the stored form keeps
    its blank output.
    """
    if is_blank(values.output) and prefs.default_output_dir:
        return update_form(values, {"output": prefs.default_output_dir})
    return values
