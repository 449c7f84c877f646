"""Logging setup for cliplaunch plus structured event helpers.

Records go to a rotating ``cliplaunch.log`` in the platform log directory.
The interactive shell owns stdout, so stderr mirroring is opt-in. Every
record can carry two sets of structured fields: the ambient context bound
with ``log_context`` (run id, mode, offset) and the per-call fields passed
to ``log_event``.
"""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping

from cliplaunch.paths import log_dir

ENV_PREFIX = "CLIPLAUNCH_LOG_"
LOG_FILE_NAME = "cliplaunch.log"
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
DEFAULT_LOG_MAX_BYTES = 2_000_000
DEFAULT_LOG_BACKUPS = 3

# Third-party loggers that are too chatty at DEBUG.
QUIET_LOGGERS = ("asyncio",)

_bound: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar("cliplaunch_log_fields", default={})


@dataclass(frozen=True)
class LogConfig:
    """Resolved logging settings, built once at startup and passed to ``configure_logging``."""

    log_file: Path
    level: int = logging.INFO
    stderr: bool = False
    json: bool = False
    max_bytes: int = DEFAULT_LOG_MAX_BYTES
    backup_count: int = DEFAULT_LOG_BACKUPS


def parse_level(value: str | None, default: int) -> int:
    """Accept a level name (``debug``) or number; unknown names keep the default."""
    if not value:
        return default
    if value.isdigit():
        return int(value)
    return logging.getLevelNamesMapping().get(value.upper(), default)


def parse_bool(value: str | None, default: bool) -> bool:
    """Read ``1``/``true``/``yes``/``on`` as True; None keeps the default."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_int(value: str | None, default: int) -> int:
    """Parse an integer setting; a typo in the environment never stops startup."""
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


def build_log_config(*, default_level: int = logging.INFO, env: Mapping[str, str] | None = None) -> LogConfig:
    """Resolve settings from ``CLIPLAUNCH_LOG_*`` variables.

    ``DIR``, ``LEVEL``, ``STDERR``, ``JSON``, ``MAX_BYTES`` and ``BACKUPS``
    are recognised; anything unparsable keeps its default.
    """
    source = os.environ if env is None else env

    def setting(name: str) -> str | None:
        return source.get(ENV_PREFIX + name)

    directory = Path(setting("DIR") or log_dir())
    directory.mkdir(parents=True, exist_ok=True)
    return LogConfig(
        log_file=directory / LOG_FILE_NAME,
        level=parse_level(setting("LEVEL"), default_level),
        stderr=parse_bool(setting("STDERR"), False),
        json=parse_bool(setting("JSON"), False),
        max_bytes=parse_int(setting("MAX_BYTES"), DEFAULT_LOG_MAX_BYTES),
        backup_count=parse_int(setting("BACKUPS"), DEFAULT_LOG_BACKUPS),
    )


def configure_logging(config: LogConfig) -> None:
    """Replace the root handlers with the ones ``config`` asks for."""
    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
    root.setLevel(config.level)

    formatter = JsonFormatter() if config.json else ContextFormatter(TEXT_FORMAT)
    targets: list[logging.Handler] = [
        RotatingFileHandler(
            config.log_file,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    ]
    if config.stderr:
        targets.append(logging.StreamHandler())
    for handler in targets:
        handler.setFormatter(formatter)
        handler.addFilter(ContextFilter())
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(config.level, logging.INFO))


@contextlib.contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Bind ``fields`` to every record logged inside the block. None values are skipped."""
    token = _bound.set({**_bound.get(), **{key: value for key, value in fields.items() if value is not None}})
    try:
        yield
    finally:
        _bound.reset(token)


def log_event(logger: logging.Logger, event: str, *, level: int = logging.INFO, **fields: Any) -> None:
    """Log a short stable event name (``execution.start``) with key=value fields.

    Stable names keep the log greppable; the details travel as fields.
    """
    logger.log(level, event, extra={"event_fields": fields})


def _render(value: Any) -> str:
    """Render one field value so a log line stays a single parseable line."""
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=True, separators=(",", ":"))
    if not isinstance(value, str):
        return str(value)
    if value == "" or '"' in value or "=" in value or any(ch.isspace() for ch in value):
        return json.dumps(value)
    return value


def format_fields(fields: Mapping[str, Any]) -> str:
    """``key=value`` pairs sorted by key; None values are left out."""
    return " ".join(f"{key}={_render(fields[key])}" for key in sorted(fields) if fields[key] is not None)


def _record_fields(record: logging.LogRecord) -> tuple[Dict[str, Any], Dict[str, Any]]:
    """Context and event fields attached by ``ContextFilter`` and ``log_event``."""
    return getattr(record, "context_fields", {}), getattr(record, "event_fields", {})


class ContextFilter(logging.Filter):
    """Stamp the bound context onto each record as it passes a handler."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003 - logging API name
        record.context_fields = dict(_bound.get())
        if not hasattr(record, "event_fields"):
            record.event_fields = {}
        return True


class ContextFormatter(logging.Formatter):
    """Plain text lines with the context and event fields appended as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        context, fields = _record_fields(record)
        suffix = " ".join(text for text in (format_fields(context), format_fields(fields)) if text)
        line = super().format(record)
        return f"{line} {suffix}" if suffix else line


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for jq and log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        context, fields = _record_fields(record)
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if context:
            payload["context"] = context
        if fields:
            payload["fields"] = fields
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)
