"""Form state for the launcher.

``FormValues`` is one flat record for every mode. Fields that belong to a
mode other than the active one are kept (so switching modes back and forth
does not lose input) and are simply ignored by the argument builder.
Records are immutable; every edit goes through ``update_form`` which
validates and returns a replacement record.
"""

from __future__ import annotations

from typing import Any, Literal, Mapping, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cliplaunch.errors import FormValidationError

Mode = Literal["copy", "get", "paste", "status", "clear", "ai"]
PasteType = Literal["auto", "text", "image", "binary"]
ImageFormat = Literal["png", "jpeg", "webp", ""]
AiAction = Literal["summarize", "classify", "transform"]

MODES: tuple[str, ...] = get_args(Mode)
PASTE_TYPES: tuple[str, ...] = get_args(PasteType)
IMAGE_FORMATS: tuple[str, ...] = get_args(ImageFormat)
AI_ACTIONS: tuple[str, ...] = get_args(AiAction)

FORM_KEY = "clipaste.form"
MAX_CLIP_OFFSET = 5


class FormValues(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    mode: Mode = "paste"

    # copy
    text: str | None = None
    file: tuple[str, ...] = ()

    # get
    raw: bool = False

    # paste
    output: str | None = None
    filename: str | None = None
    type: PasteType = "auto"
    format: ImageFormat = ""
    quality: str | None = None
    auto_extension: bool = False
    dry_run: bool = False

    # ai
    ai_action: AiAction | None = None
    ai_labels: str | None = None
    ai_instruction: str | None = None

    template_args: str | None = None
    recipe_id: str | None = None
    clip_offset: int = Field(0, ge=0, le=MAX_CLIP_OFFSET)


FIELD_NAMES: tuple[str, ...] = tuple(FormValues.model_fields)


def default_form() -> FormValues:
    return FormValues()


def update_form(values: FormValues, patch: Mapping[str, Any]) -> FormValues:
    """Return a new record with ``patch`` applied to ``values``.

    Raises FormValidationError for unknown fields or invalid values.
    """
    unknown = [key for key in patch if key not in FormValues.model_fields]
    if unknown:
        raise FormValidationError(f"Unknown form field: {unknown[0]}", field=unknown[0])
    merged = {**values.model_dump(), **patch}
    try:
        return FormValues.model_validate(merged)
    except ValidationError as exc:
        error = exc.errors()[0]
        location = ".".join(str(part) for part in error.get("loc", ()))
        raise FormValidationError(f"{location}: {error.get('msg')}", field=location or None) from exc


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()
