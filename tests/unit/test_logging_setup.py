import json
import logging
import logging.handlers
import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from lockcraft_core.logging_setup import (
    JsonFormatter,
    RecentEventsHandler,
    _report_crash,
    configure_logging,
    get_logger,
    recent_events,
)


def _record(msg, level=logging.INFO, event=None, context=None, exc_info=None):
    record = logging.LogRecord("lockcraft.core.pipeline", level, __file__, 1, msg, None, exc_info)
    if event is not None:
        record.event = event
    if context is not None:
        record.context = context
    return record


class LoggingTests(unittest.TestCase):
    def test_json_formatter_includes_event_and_context(self):
        record = _record("text overflow", logging.WARNING, "text_overflow", {"font_size": 12})
        payload = json.loads(JsonFormatter().format(record))
        self.assertEqual(payload["level"], "WARNING")
        self.assertEqual(payload["msg"], "text overflow")
        self.assertEqual(payload["event"], "text_overflow")
        self.assertEqual(payload["context"], {"font_size": 12})
        self.assertIn("ts_utc", payload)

    def test_json_formatter_includes_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record("failed", logging.ERROR, exc_info=sys.exc_info())
        payload = json.loads(JsonFormatter().format(record))
        self.assertIn("RuntimeError: boom", payload["exc"])
        self.assertNotIn("event", payload)

    def test_recent_events_keep_latest_matching(self):
        handler = RecentEventsHandler(capacity=2, events={"render_done"})
        handler.handle(_record("one", event="render_done", context={"n": 1}))
        handler.handle(_record("ignored", event="logging_configured"))
        handler.handle(_record("plain"))
        handler.handle(_record("two", event="render_done", context={"n": 2}))
        handler.handle(_record("three", event="render_done", context={"n": 3}))
        self.assertEqual([r["context"]["n"] for r in handler.snapshot()], [2, 3])
        handler.clear()
        self.assertEqual(handler.snapshot(), [])

    def test_configure_logging_writes_json_lines_once(self):
        logger = logging.getLogger("lockcraft")
        saved_handlers, saved_level = list(logger.handlers), logger.level
        for handler in saved_handlers:
            logger.removeHandler(handler)
        try:
            with tempfile.TemporaryDirectory() as tmp:
                with mock.patch.dict(os.environ, {"LOCKCRAFT_HOME": tmp}):
                    configure_logging(console=False)
                    configure_logging(console=False)
                    rotating = [h for h in logger.handlers if isinstance(h, logging.handlers.TimedRotatingFileHandler)]
                    self.assertEqual(len(rotating), 1)

                    get_logger("core.pipeline").info(
                        "render done", extra={"event": "render_done", "context": {"ms": 5}}
                    )
                    rotating[0].flush()
                    lines = (Path(tmp) / "logs" / "lockcraft.log").read_text(encoding="utf-8").splitlines()
                    last = json.loads(lines[-1])
                    self.assertEqual(last["event"], "render_done")
                    self.assertEqual(last["logger"], "lockcraft.core.pipeline")
                    self.assertEqual(recent_events()[-1]["context"], {"ms": 5})
                    rotating[0].close()
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
            for handler in saved_handlers:
                logger.addHandler(handler)
            logger.setLevel(saved_level)

    def test_crash_report_is_logged_with_id(self):
        with self.assertLogs("lockcraft", logging.CRITICAL) as captured:
            try:
                raise ValueError("bad")
            except ValueError:
                _report_crash("uncaught_exception", sys.exc_info())
        record = captured.records[-1]
        self.assertEqual(record.event, "uncaught_exception")
        self.assertEqual(len(record.context["crash_id"]), 32)

    def test_child_loggers_share_root(self):
        self.assertEqual(get_logger().name, "lockcraft")
        self.assertEqual(get_logger("core.pipeline").name, "lockcraft.core.pipeline")


if __name__ == "__main__":
    unittest.main()
