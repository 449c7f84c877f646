"""Recipe catalog: named presets of leading clipaste arguments.

Built-in recipes ship with the package. A ``recipes.json`` file in the config
directory (``{"recipes": [{"id": ..., "label": ..., "args": [...]}]}``) adds
entries or replaces built-ins with the same id.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cliplaunch import paths
from cliplaunch.log_utils import log_event

logger = logging.getLogger(__name__)


class Recipe(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1)
    label: str
    args: tuple[str, ...] = ()


BUILTIN_RECIPES: tuple[Recipe, ...] = (
    Recipe(id="verbose", label="Verbose output", args=("--verbose",)),
    Recipe(id="quiet", label="Quiet (errors only)", args=("--quiet",)),
    Recipe(id="no-color", label="Plain output (no colour)", args=("--no-color",)),
)


class RecipeCatalog:
    """Read-only lookup table keyed by recipe id."""

    def __init__(self, recipes: Iterable[Recipe] = ()) -> None:
        self._recipes: dict[str, Recipe] = {}
        for recipe in recipes:
            self._recipes[recipe.id] = recipe

    def lookup(self, recipe_id: str | None) -> Recipe | None:
        """Return the recipe for ``recipe_id``, or None when it is unset or unknown."""
        if not recipe_id:
            return None
        return self._recipes.get(recipe_id)

    def all(self) -> list[Recipe]:
        return list(self._recipes.values())

    def __len__(self) -> int:
        return len(self._recipes)

    def __contains__(self, recipe_id: object) -> bool:
        return recipe_id in self._recipes


def user_recipes_file() -> Path:
    return paths.recipes_path()


def _parse_entries(payload: Any, source: Path) -> list[Recipe]:
    entries = payload.get("recipes", []) if isinstance(payload, dict) else []
    if not isinstance(entries, list):
        logger.warning("Ignoring %s: 'recipes' must be a list", source)
        return []
    recipes: list[Recipe] = []
    for entry in entries:
        try:
            recipes.append(Recipe.model_validate(entry))
        except ValidationError as exc:
            log_event(logger, "recipes.invalid_entry", level=logging.WARNING, source=str(source), error=str(exc))
    return recipes


def load_user_recipes(path: Path | None = None) -> list[Recipe]:
    path = path or user_recipes_file()
    if not path.exists():
        return []
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not read recipes from %s: %s", path, exc)
        return []
    return _parse_entries(payload, path)


def load_catalog(path: Path | None = None) -> RecipeCatalog:
    """Built-in recipes overlaid with the user's recipe file."""
    user = load_user_recipes(path)
    catalog = RecipeCatalog([*BUILTIN_RECIPES, *user])
    log_event(logger, "recipes.loaded", level=logging.DEBUG, builtin=len(BUILTIN_RECIPES), user=len(user))
    return catalog
