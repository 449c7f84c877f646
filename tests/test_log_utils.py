from __future__ import annotations

import json
import logging

from cliplaunch.log_utils import (
    ContextFilter,
    ContextFormatter,
    JsonFormatter,
    build_log_config,
    log_context,
    log_event,
)


class _Collect(logging.Handler):
    def __init__(self, formatter: logging.Formatter) -> None:
        super().__init__()
        self.setFormatter(formatter)
        self.addFilter(ContextFilter())
        self.lines: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.lines.append(self.format(record))


def _logger(handler: logging.Handler) -> logging.Logger:
    logger = logging.getLogger("cliplaunch.tests.logging")
    logger.handlers = [handler]
    logger.propagate = False
    logger.setLevel(logging.DEBUG)
    return logger


def test_context_and_event_fields_are_appended():
    handler = _Collect(ContextFormatter("%(message)s"))
    logger = _logger(handler)
    with log_context(run_id="abc", mode="paste"):
        log_event(logger, "execution.start", argv=["paste", "--x"], note="two words")
    log_event(logger, "plain")

    assert handler.lines[0] == 'execution.start mode=paste run_id=abc argv=["paste","--x"] note="two words"'
    assert handler.lines[1] == "plain"


def test_json_formatter():
    handler = _Collect(JsonFormatter())
    logger = _logger(handler)
    with log_context(run_id="abc"):
        log_event(logger, "clipboard.read", offset=2)
    payload = json.loads(handler.lines[0])
    assert payload["message"] == "clipboard.read"
    assert payload["context"] == {"run_id": "abc"}
    assert payload["fields"] == {"offset": 2}


def test_build_log_config_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("CLIPLAUNCH_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("CLIPLAUNCH_LOG_LEVEL", "warning")
    monkeypatch.setenv("CLIPLAUNCH_LOG_JSON", "1")
    monkeypatch.setenv("CLIPLAUNCH_LOG_MAX_BYTES", "oops")

    config = build_log_config()

    assert config.log_file == tmp_path / "logs" / "cliplaunch.log"
    assert config.level == logging.WARNING
    assert config.json is True
    assert config.max_bytes == 2_000_000
