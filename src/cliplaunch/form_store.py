"""Persisted form values, keyed by form identifier.

All forms share one JSON document in the state directory. Each save
rewrites the whole record for its key; there is no field-level merging,
so the last write wins.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from pydantic import ValidationError

from cliplaunch import paths
from cliplaunch.form import FormValues, default_form
from cliplaunch.log_utils import log_event

logger = logging.getLogger(__name__)


def default_store_path() -> Path:
    return paths.forms_path()


@dataclass
class FormStore:
    path: Path = field(default_factory=default_store_path)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable form store %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def load(self, key: str) -> FormValues:
        """Return the stored record for ``key`` or the defaults."""
        payload = self._read_all().get(key)
        if payload is None:
            return default_form()
        try:
            return FormValues.model_validate(payload)
        except ValidationError as exc:
            log_event(logger, "form_store.invalid_record", level=logging.WARNING, key=key, error=str(exc))
            return default_form()

    def _write_all(self, data: Dict[str, Any]) -> None:
        """Swap in the new document with a rename so readers never see a partial file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".forms-", suffix=".json")
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2)
        os.replace(tmp_name, self.path)

    def save(self, key: str, values: FormValues) -> None:
        data = self._read_all()
        data[key] = values.model_dump(mode="json")
        self._write_all(data)

    def clear(self, key: str) -> None:
        """Drop the record for ``key``; later loads return the defaults."""
        data = self._read_all()
        if data.pop(key, None) is not None:
            self._write_all(data)
