"""JSON-lines logging, an in-memory render event history, and crash hooks.

Every module logs through a ``lockcraft.*`` logger and tags structured records
with ``extra={"event": ..., "context": {...}}``.
"""

from __future__ import annotations

import faulthandler
import json
import logging
import logging.handlers
import sys
import threading
import uuid
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, TextIO

from .config import config_root


ROOT_LOGGER = "lockcraft"
LOG_FILE = "lockcraft.log"
FAULT_FILE = "fault.log"

RENDER_EVENTS = frozenset(
    {
        "render_done",
        "text_overflow",
        "font_fallback",
        "blur_fallback",
        "background_decode_failed",
        "wallpaper_saved",
        "command_failed",
    }
)

_fault_stream: TextIO | None = None


def log_dir() -> Path:
    path = config_root() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def _base_payload(record: logging.LogRecord) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "ts_utc": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
        "level": record.levelname,
        "logger": record.name,
        "msg": record.getMessage(),
    }
    for key in ("event", "context"):
        value = getattr(record, key, None)
        if value is not None:
            payload[key] = value
    return payload


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = _base_payload(record)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class RecentEventsHandler(logging.Handler):
    """Ring buffer of the latest structured events, attached to diagnostics bundles."""

    def __init__(self, capacity: int = 50, events: Iterable[str] | None = None) -> None:
        super().__init__(level=logging.DEBUG)
        self.events = frozenset(events) if events is not None else None
        self._records: deque[dict[str, Any]] = deque(maxlen=max(1, capacity))

    def emit(self, record: logging.LogRecord) -> None:
        event = getattr(record, "event", None)
        if event is None:
            return
        if self.events is not None and event not in self.events:
            return
        self._records.append(_base_payload(record))

    def snapshot(self) -> list[dict[str, Any]]:
        with self.lock:  # type: ignore[union-attr]
            return list(self._records)

    def clear(self) -> None:
        with self.lock:  # type: ignore[union-attr]
            self._records.clear()


_recent = RecentEventsHandler(events=RENDER_EVENTS)


def recent_events() -> list[dict[str, Any]]:
    return _recent.snapshot()


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def configure_logging(keep_files: int = 7, console: bool = True, level: int = logging.INFO) -> logging.Logger:
    """Attach the rotating JSON file handler once per process; later calls are no-ops."""
    logger = get_logger()
    if any(isinstance(h, logging.handlers.TimedRotatingFileHandler) for h in logger.handlers):
        return logger

    logger.setLevel(level)
    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=str(log_dir() / LOG_FILE),
        when="midnight",
        backupCount=max(2, keep_files),
        encoding="utf-8",
    )
    file_handler.setFormatter(JsonFormatter())
    logger.addHandler(file_handler)
    if _recent not in logger.handlers:
        logger.addHandler(_recent)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(console_handler)

    logger.debug("logging configured", extra={"event": "logging_configured", "context": {"dir": str(log_dir())}})
    return logger


def _report_crash(kind: str, exc_info: tuple[Any, Any, Any]) -> None:
    crash_id = uuid.uuid4().hex
    get_logger().critical(
        "%s crash_id=%s",
        kind.replace("_", " "),
        crash_id,
        exc_info=exc_info,
        extra={"event": kind, "context": {"crash_id": crash_id}},
    )


def install_crash_hooks() -> None:
    global _fault_stream

    sys.excepthook = lambda exc_type, exc, tb: _report_crash("uncaught_exception", (exc_type, exc, tb))
    threading.excepthook = lambda args: _report_crash(
        "thread_exception", (args.exc_type, args.exc_value, args.exc_traceback)
    )

    if _fault_stream is None:
        _fault_stream = (log_dir() / FAULT_FILE).open("a", encoding="utf-8")
        faulthandler.enable(file=_fault_stream, all_threads=True)
    get_logger().info("crash hooks installed", extra={"event": "crash_hooks_installed"})
