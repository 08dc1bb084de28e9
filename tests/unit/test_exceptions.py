"""
Unit tests for error handling and structured logging.
"""

import json
import logging
import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

from vendtycoon.core.exceptions import (
    AssetLoadingError, ErrorHandler, ErrorSeverity, InvalidConfigValueError,
    LoadFailedError, SessionStateError, VendTycoonError, get_error_handler,
    reset_error_handler, safe_execute
)
from vendtycoon.core.logging import GameClockFilter, LoggerManager, StructuredFormatter


class TestExceptions(unittest.TestCase):
    """Test exception messages, codes and context."""

    def test_base_error(self):
        cause = ValueError("bad")
        error = VendTycoonError("Something failed", context={"a": 1}, cause=cause)

        self.assertEqual(error.error_code, "VendTycoonError")
        self.assertEqual(error.severity, ErrorSeverity.MEDIUM)
        self.assertEqual(str(error), "VendTycoonError: Something failed | Context: a=1 | Caused by: bad")

        data = error.to_dict()
        self.assertEqual(data["message"], "Something failed")
        self.assertEqual(data["severity"], "medium")
        self.assertEqual(data["cause"], "bad")

    def test_session_state_error(self):
        error = SessionStateError("start", "exited")

        self.assertEqual(error.message, "Cannot start while session is exited")
        self.assertEqual(error.context, {"operation": "start", "phase": "exited"})

    def test_config_and_persistence_context(self):
        config_error = InvalidConfigValueError("app.fps_target", "fast", "a number")
        load_error = LoadFailedError("corrupt", path="/tmp/save.json")

        self.assertEqual(config_error.context["config_key"], "app.fps_target")
        self.assertIn("'fast'", config_error.message)
        self.assertEqual(load_error.context["path"], "/tmp/save.json")

    def test_asset_errors_are_low_severity(self):
        error = AssetLoadingError("title.png")

        self.assertEqual(error.severity, ErrorSeverity.LOW)
        self.assertEqual(error.context["asset_name"], "title.png")


class TestErrorHandler(unittest.TestCase):
    """Test the central error handler."""

    def setUp(self):
        self.handler = ErrorHandler()

    def tearDown(self):
        reset_error_handler()

    def test_error_callbacks_receive_context(self):
        callback = Mock()
        self.handler.register_error_callback(callback)

        error = SessionStateError("toggle", "exited")
        self.handler.handle_error(error, {"screen": "main"})

        callback.assert_called_once()
        passed_error, context = callback.call_args[0]
        self.assertIs(passed_error, error)
        self.assertEqual(context["screen"], "main")
        self.assertEqual(context["error_code"], "SessionStateError")

    def test_failing_callback_does_not_propagate(self):
        self.handler.register_error_callback(Mock(side_effect=RuntimeError("oops")))
        self.handler.handle_error(ValueError("original"))

    def test_crash_handlers_run_before_settings_save(self):
        order = []
        self.handler.register_crash_handler(lambda error, emergency: order.append("handler"))

        with patch.object(self.handler, "_emergency_save", side_effect=lambda: order.append("settings")):
            self.handler.handle_crash(RuntimeError("fatal"))

        self.assertEqual(order, ["handler", "settings"])

    def test_crash_without_emergency_save(self):
        handler = Mock()
        self.handler.register_crash_handler(handler)

        with patch.object(self.handler, "_emergency_save") as emergency_save:
            self.handler.handle_crash(RuntimeError("fatal"), emergency_save=False)

        handler.assert_called_once()
        self.assertFalse(handler.call_args[0][1])
        emergency_save.assert_not_called()

    def test_safe_execute(self):
        reset_error_handler()
        callback = Mock()
        get_error_handler().register_error_callback(callback)

        self.assertEqual(safe_execute(lambda x: x * 2, 21), 42)
        self.assertIsNone(safe_execute(lambda: 1 / 0))
        callback.assert_called_once()


class TestStructuredLogging(unittest.TestCase):
    """Test log formatting and file output."""

    def make_record(self, **extra):
        record = logging.LogRecord("vendtycoon.test", logging.INFO, __file__, 10,
                                   "Game saved", None, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_format_includes_extra(self):
        formatter = StructuredFormatter("json")
        output = json.loads(formatter.format(self.make_record(machines=3, path=Path("/tmp/x"))))

        self.assertEqual(output["message"], "Game saved")
        self.assertEqual(output["logger"], "vendtycoon.test")
        self.assertEqual(output["extra"]["machines"], 3)
        self.assertEqual(output["extra"]["path"], str(Path("/tmp/x")))
        self.assertNotIn("game_time", output)

    def test_json_format_groups_game_time(self):
        formatter = StructuredFormatter("json")
        output = json.loads(formatter.format(self.make_record(day=3, hour=14, saved=True)))

        self.assertEqual(output["game_time"], {"day": 3, "hour": 14})
        self.assertEqual(output["extra"], {"saved": True})

    def test_human_format(self):
        formatter = StructuredFormatter("human", use_colors=False)
        output = formatter.format(self.make_record(day=3))

        self.assertIn("Game saved", output)
        self.assertIn("day=3", output)

    def test_human_format_tags_game_time(self):
        formatter = StructuredFormatter("human", use_colors=False)
        output = formatter.format(self.make_record(day=3, hour=7, saved=True))

        self.assertIn("[Day 3 07:00] Game saved", output)
        self.assertNotIn("day=3", output)
        self.assertIn("saved=True", output)

    def test_game_clock_stamps_records(self):
        clock_filter = GameClockFilter()
        record = self.make_record()
        clock_filter.filter(record)
        self.assertFalse(hasattr(record, "day"))

        clock_filter.clock = lambda: (4, 9)
        clock_filter.filter(record)
        self.assertEqual((record.day, record.hour), (4, 9))

        explicit = self.make_record(day=2)
        clock_filter.filter(explicit)
        self.assertEqual(explicit.day, 2)
        self.assertFalse(hasattr(explicit, "hour"))

    def test_inactive_game_clock_leaves_records_alone(self):
        clock_filter = GameClockFilter()
        clock_filter.clock = lambda: None
        record = self.make_record()

        self.assertTrue(clock_filter.filter(record))
        self.assertFalse(hasattr(record, "day"))

    def test_logger_names_are_namespaced(self):
        manager = LoggerManager()
        self.assertEqual(manager.get_logger("session.lifecycle").name,
                         "vendtycoon.session.lifecycle")

    def test_file_output(self):
        root_logger = logging.getLogger()
        saved_handlers = root_logger.handlers[:]
        saved_level = root_logger.level

        with tempfile.TemporaryDirectory() as temp_dir:
            manager = LoggerManager()
            try:
                manager.configure(log_level="INFO", log_dir=temp_dir,
                                  console_output=False, file_output=True)
                manager.get_logger("test").error("Save failed", extra={"day": 2})
                manager.bind_game_clock(lambda: (5, 8))
                manager.get_logger("test").info("Machine restocked")
                for handler in root_logger.handlers:
                    handler.flush()

                self.assertTrue(manager.is_configured)
                self.assertIn("Save failed", (Path(temp_dir) / "vendtycoon.log").read_text())
                self.assertIn("day=2", (Path(temp_dir) / "vendtycoon_errors.log").read_text())
                self.assertIn("[Day 5 08:00] Machine restocked",
                              (Path(temp_dir) / "vendtycoon.log").read_text())
            finally:
                manager.bind_game_clock(None)
                for handler in root_logger.handlers[:]:
                    handler.close()
                    root_logger.removeHandler(handler)
                for handler in saved_handlers:
                    root_logger.addHandler(handler)
                root_logger.setLevel(saved_level)


if __name__ == '__main__':
    unittest.main()
