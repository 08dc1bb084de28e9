"""
Unit tests for configuration, settings and command line overrides.
"""

import json
import os
import tempfile
import unittest
from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

from vendtycoon.config import Config, Settings, reset_config, reset_settings, set_config
from vendtycoon.core.exceptions import InvalidConfigValueError
from vendtycoon.main import apply_command_line_overrides, parse_window_size, setup_argument_parser


class ConfigTestCase(unittest.TestCase):
    """Builds configs isolated from the user's home directory and ./config.json."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        self.env_patcher = patch.dict(os.environ, {
            k: v for k, v in os.environ.items() if not k.startswith("VENDTYCOON_")
        }, clear=True)
        self.env_patcher.start()

    def tearDown(self):
        self.env_patcher.stop()
        self.temp_dir.cleanup()
        reset_config()
        reset_settings()

    def make_config(self, file_config=None):
        config_file = self.root / "config.json"
        if file_config is not None:
            config_file.write_text(json.dumps(file_config), encoding="utf-8")
        return Config(config_file=config_file, user_config_dir=self.root / "user")


class TestConfig(ConfigTestCase):

    def test_defaults(self):
        config = self.make_config()

        self.assertEqual(config.get("app.window.width"), 480)
        self.assertEqual(config.get("game.starting_cash"), "2000.00")
        self.assertEqual(config.get("game.seconds_per_game_hour"), 12.5)
        self.assertIsNone(config.get("save.file"))
        self.assertEqual(config.get("missing.key", "fallback"), "fallback")

    def test_file_overrides_defaults(self):
        config = self.make_config({"game": {"starting_cash": "750"}})

        self.assertEqual(config.get("game.starting_cash"), "750")
        self.assertEqual(config.get("game.log_history_limit"), 100)

    def test_user_config_is_loaded(self):
        user_dir = self.root / "user"
        user_dir.mkdir()
        (user_dir / "config.json").write_text(json.dumps({"app": {"debug": True}}), encoding="utf-8")

        self.assertTrue(self.make_config().debug)

    def test_invalid_file_is_ignored(self):
        config_file = self.root / "config.json"
        config_file.write_text("{broken", encoding="utf-8")

        with patch("sys.stderr"):
            config = Config(config_file=config_file, user_config_dir=self.root / "user")

        self.assertEqual(config.get("app.fps_target"), 60)

    def test_environment_overrides(self):
        os.environ["VENDTYCOON_GAME__SECONDS_PER_GAME_HOUR"] = "2.5"
        os.environ["VENDTYCOON_SAVE__EPHEMERAL"] = "yes"
        os.environ["VENDTYCOON_APP__NAME"] = "Snack Empire"

        config = self.make_config()

        self.assertEqual(config.get("game.seconds_per_game_hour"), 2.5)
        self.assertTrue(config.get("save.ephemeral"))
        self.assertEqual(config.get("app.name"), "Snack Empire")

    def test_set_save_and_reload(self):
        config = self.make_config()
        config.set("ui.notification_seconds", 3.0)
        config.save()

        reloaded = Config(config_file=self.root / "config.json", user_config_dir=self.root / "user")
        self.assertEqual(reloaded.get("ui.notification_seconds"), 3.0)

        reloaded.reset_to_defaults()
        self.assertEqual(reloaded.get("ui.notification_seconds"), 2.0)

    def test_get_all_is_a_copy(self):
        config = self.make_config()
        everything = config.get_all()
        everything["app"]["name"] = "changed"

        self.assertEqual(config.get("app.name"), "Vending Tycoon")


class TestSettings(ConfigTestCase):

    def test_typed_values(self):
        settings = Settings(self.make_config())

        self.assertEqual(settings.starting_cash, Decimal("2000.00"))
        self.assertEqual(settings.window_size, (480, 854))
        self.assertEqual(settings.target_fps, 60)
        self.assertEqual(settings.save_file, self.root / "user" / "savegame.json")
        self.assertFalse(settings.ephemeral_saves)
        self.assertTrue(str(settings.assets_dir).endswith(os.path.join("assets", "images")))

    def test_values_are_clamped(self):
        settings = Settings(self.make_config({
            "app": {"fps_target": 1000, "window": {"width": 10, "height": 99999}},
            "game": {"seconds_per_game_hour": 0, "log_history_limit": 5},
            "ui": {"notification_seconds": 60},
        }))

        self.assertEqual(settings.target_fps, 240)
        self.assertEqual(settings.window_size, (320, 4320))
        self.assertEqual(settings.seconds_per_game_hour, 0.1)
        self.assertEqual(settings.log_history_limit, 10)
        self.assertEqual(settings.notification_seconds, 10.0)

    def test_invalid_values_raise(self):
        settings = Settings(self.make_config({
            "app": {"fps_target": "fast"},
            "game": {"starting_cash": "plenty"},
        }))

        with self.assertRaises(InvalidConfigValueError):
            settings.target_fps
        with self.assertRaises(InvalidConfigValueError):
            settings.starting_cash

    def test_oversized_starting_cash_raises(self):
        settings = Settings(self.make_config({"game": {"starting_cash": "1e30"}}))

        with self.assertRaises(InvalidConfigValueError):
            settings.starting_cash

    def test_display_info(self):
        settings = Settings(self.make_config({"app": {"window": {"fullscreen": True}}}))

        self.assertEqual(settings.get_display_info(), {
            "width": 480,
            "height": 854,
            "fullscreen": True,
            "resizable": True,
            "fps_target": 60,
        })

    def test_log_level_falls_back_to_info(self):
        settings = Settings(self.make_config({"app": {"log_level": "chatty"}}))
        self.assertEqual(settings.log_level, "INFO")

    def test_development_mode(self):
        settings = Settings(self.make_config())
        self.assertFalse(settings.is_development_mode())

        settings.update_setting("app.debug", True)
        self.assertTrue(settings.is_development_mode())


class TestCommandLine(ConfigTestCase):

    def test_parse_window_size(self):
        self.assertEqual(parse_window_size("720x1280"), (720, 1280))
        self.assertEqual(parse_window_size("720X1280"), (720, 1280))

        for bad in ("720", "0x100", "axb"):
            with self.subTest(size=bad):
                with self.assertRaises(ValueError):
                    parse_window_size(bad)

    def test_overrides_apply_to_global_config(self):
        config = self.make_config()
        set_config(config)
        args = setup_argument_parser().parse_args([
            "--debug", "--window-size", "600x900", "--ephemeral",
            "--save-file", str(self.root / "slot.json"), "--show-performance",
        ])

        apply_command_line_overrides(args)

        settings = Settings(config)
        self.assertTrue(settings.debug_mode)
        self.assertEqual(settings.log_level, "DEBUG")
        self.assertEqual(settings.window_size, (600, 900))
        self.assertTrue(settings.ephemeral_saves)
        self.assertEqual(settings.save_file, self.root / "slot.json")
        self.assertTrue(settings.show_performance_overlay)


if __name__ == '__main__':
    unittest.main()
