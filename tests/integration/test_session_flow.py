"""
Session Integration Tests

End-to-end play sessions against the JSON save file, plus the command
line utilities and the crash-time emergency save.
"""

import io
import json
import tempfile
import unittest
from contextlib import redirect_stdout
from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

from vendtycoon.config import Config, Settings, reset_config, reset_settings, set_config
from vendtycoon.core.exceptions import get_error_handler, reset_error_handler
from vendtycoon.main import main, register_emergency_save
from vendtycoon.session import (
    InMemoryPersistenceGateway, JsonFilePersistenceGateway, LoadStatus,
    MachineRef, MachineStatus, SessionPhase, Snapshot, create_session
)


class SessionFlowTestCase(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        self.config = Config(config_file=self.root / "config.json", user_config_dir=self.root)
        self.config.set("game.seconds_per_game_hour", 1.0)
        self.config.set("game.starting_cash", "1500")
        self.settings = Settings(self.config)
        set_config(self.config)
        reset_settings()

    def tearDown(self):
        reset_config()
        reset_settings()
        reset_error_handler()
        self.temp_dir.cleanup()


class TestPlaySession(SessionFlowTestCase):
    """Play, save, quit and resume against the save file."""

    async def test_create_session_uses_settings(self):
        session = create_session(self.settings)

        self.assertIsInstance(session.gateway, JsonFilePersistenceGateway)
        self.assertEqual(session.gateway.path, self.root / "savegame.json")
        self.assertEqual(session.cash, Decimal("1500.00"))
        self.assertEqual(session.controller.clock.seconds_per_game_hour, 1.0)
        self.assertEqual(session.phase, SessionPhase.NOT_STARTED)

    async def test_ephemeral_session(self):
        self.config.set("save.ephemeral", True)
        session = create_session(self.settings)

        self.assertIsInstance(session.gateway, InMemoryPersistenceGateway)

    async def test_play_exit_and_resume(self):
        session = create_session(self.settings)
        self.assertFalse(await session.has_saved_game())

        session.new_game()
        session.update(30.0)
        self.assertEqual((session.day_count, session.hour_of_day), (2, 6))

        self.assertTrue(await session.exit_to_menu())
        self.assertEqual(session.phase, SessionPhase.EXITED)

        resumed = create_session(self.settings)
        self.assertTrue(await resumed.has_saved_game())

        result = await resumed.load_saved_game()
        self.assertEqual(result.status, LoadStatus.LOADED)
        self.assertEqual((resumed.day_count, resumed.hour_of_day), (2, 6))
        self.assertFalse(resumed.is_running)

        resumed.start()
        resumed.update(1.0)
        self.assertEqual(resumed.hour_of_day, 7)

    async def test_corrupt_save_file(self):
        (self.root / "savegame.json").write_text("garbage", encoding="utf-8")
        session = create_session(self.settings)
        session.new_game()

        result = await session.load_saved_game()

        self.assertEqual(result.status, LoadStatus.FAILED)
        self.assertTrue(session.is_running)
        self.assertEqual(session.phase, SessionPhase.RUNNING)

    async def test_emergency_save_on_crash(self):
        session = create_session(self.settings)
        session.new_game()
        session.update(5.0)
        register_emergency_save(session)

        handler = get_error_handler()
        with patch.object(handler, "_emergency_save"):
            handler.handle_crash(RuntimeError("fatal"))

        saved = await session.gateway.load()
        self.assertEqual(saved.hour_of_day, 5)

    async def test_no_emergency_save_before_play(self):
        session = create_session(self.settings)
        register_emergency_save(session)

        handler = get_error_handler()
        with patch.object(handler, "_emergency_save"):
            handler.handle_crash(RuntimeError("fatal"))

        self.assertFalse(await session.has_saved_game())


@patch("vendtycoon.main.shutdown_logging")
class TestCommandLineUtilities(SessionFlowTestCase):
    """Test the saved-game utility commands."""

    def run_main(self, *argv):
        output = io.StringIO()
        with redirect_stdout(output):
            code = main(list(argv))
        return code, output.getvalue()

    def write_save(self):
        snapshot = Snapshot(cash="88.10", reputation=4, day_count=7, hour_of_day=13,
                            machines=(MachineRef("m1", "Lobby", status=MachineStatus.EMPTY),))
        path = self.root / "slot.json"
        JsonFilePersistenceGateway(path).save_sync(snapshot)
        return path

    def test_show_save(self, _shutdown):
        path = self.write_save()

        code, output = self.run_main("--show-save", "--save-file", str(path))

        self.assertEqual(code, 0)
        self.assertIn("$88.10", output)
        self.assertIn("Day 7, 13:00", output)
        self.assertIn("1 (1 alerts)", output)

    def test_show_missing_save(self, _shutdown):
        code, output = self.run_main("--show-save", "--save-file", str(self.root / "none.json"))

        self.assertEqual(code, 0)
        self.assertIn("No saved game", output)

    def test_show_corrupt_save(self, _shutdown):
        path = self.root / "broken.json"
        path.write_text("{", encoding="utf-8")

        code, output = self.run_main("--show-save", "--save-file", str(path))

        self.assertEqual(code, 1)
        self.assertIn("unreadable", output)

    def test_show_save_with_oversized_cash(self, _shutdown):
        path = self.root / "huge.json"
        path.write_text(json.dumps({"kind": "vendtycoon_save", "snapshot": {"cash": "1e30"}}),
                        encoding="utf-8")

        code, output = self.run_main("--show-save", "--save-file", str(path))

        self.assertEqual(code, 1)
        self.assertIn("unreadable", output)

    def test_delete_save(self, _shutdown):
        path = self.write_save()

        code, output = self.run_main("--delete-save", "--save-file", str(path))

        self.assertEqual(code, 0)
        self.assertFalse(path.exists())
        self.assertIn("Deleted", output)

    def test_bad_window_size_fails_initialization(self, _shutdown):
        with patch("vendtycoon.main.run_application") as run_application, \
                patch("sys.stderr", new_callable=io.StringIO):
            code, _ = self.run_main("--window-size", "huge")

        self.assertEqual(code, 1)
        run_application.assert_not_called()


if __name__ == '__main__':
    unittest.main()
