"""
Unit tests for the saved-game gateways.
"""

import json
import os
import tempfile
import unittest
from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

from vendtycoon.core.exceptions import LoadFailedError, SaveFailedError
from vendtycoon.session.persistence import (
    InMemoryPersistenceGateway, JsonFilePersistenceGateway
)
from vendtycoon.session.snapshot import MachineRef, MachineStatus, Snapshot


class TestJsonFilePersistenceGateway(unittest.IsolatedAsyncioTestCase):
    """Test the JSON file gateway against a temporary directory."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = Path(self.temp_dir.name) / "saves" / "savegame.json"
        self.gateway = JsonFilePersistenceGateway(self.path)
        self.snapshot = Snapshot(
            cash="1520.75", reputation=12, day_count=6, hour_of_day=17,
            machines=[MachineRef("m1", "Station", 3.0, 4.0, MachineStatus.EMPTY)],
        )

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_save_then_load(self):
        self.assertFalse(await self.gateway.has_saved_game())

        self.assertTrue(await self.gateway.save(self.snapshot))
        self.assertTrue(await self.gateway.has_saved_game())

        loaded = await self.gateway.load()
        self.assertEqual(loaded, self.snapshot)
        self.assertEqual(loaded.cash, Decimal("1520.75"))

    async def test_load_missing_file(self):
        self.assertIsNone(await self.gateway.load())

    async def test_save_document_layout(self):
        await self.gateway.save(self.snapshot)

        with open(self.path, "r", encoding="utf-8") as f:
            document = json.load(f)

        self.assertEqual(document["kind"], "vendtycoon_save")
        self.assertIn("saved_at", document)
        self.assertEqual(document["snapshot"]["cash"], "1520.75")

        metadata = self.gateway.read_metadata()
        self.assertEqual(metadata["kind"], "vendtycoon_save")
        self.assertNotIn("snapshot", metadata)

    async def test_overwrite_leaves_no_temp_files(self):
        await self.gateway.save(self.snapshot)
        await self.gateway.save(self.snapshot.with_time(7, 0))

        loaded = await self.gateway.load()
        self.assertEqual(loaded.time_key, (7, 0))
        self.assertEqual(os.listdir(self.path.parent), ["savegame.json"])

    async def test_failed_write_keeps_previous_save(self):
        await self.gateway.save(self.snapshot)

        with patch("vendtycoon.session.persistence.os.replace", side_effect=OSError("disk full")):
            self.assertFalse(await self.gateway.save(self.snapshot.with_time(9, 0)))
        self.assertIsInstance(self.gateway.last_error, SaveFailedError)
        self.assertEqual(self.gateway.last_error.context["path"], str(self.path))

        loaded = await self.gateway.load()
        self.assertEqual(loaded.time_key, (6, 17))
        self.assertEqual(os.listdir(self.path.parent), ["savegame.json"])

    async def test_corrupt_file_raises(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json", encoding="utf-8")

        with self.assertRaises(LoadFailedError):
            await self.gateway.load()

    async def test_foreign_document_raises(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text(json.dumps({"kind": "something_else"}), encoding="utf-8")

        with self.assertRaises(LoadFailedError):
            await self.gateway.load()

    async def test_invalid_snapshot_raises(self):
        self.path.parent.mkdir(parents=True)
        document = {"kind": "vendtycoon_save", "snapshot": {"cash": "1", "hour_of_day": 99}}
        self.path.write_text(json.dumps(document), encoding="utf-8")

        with self.assertRaises(LoadFailedError):
            await self.gateway.load()

    async def test_oversized_cash_raises(self):
        self.path.parent.mkdir(parents=True)
        document = {"kind": "vendtycoon_save", "snapshot": {"cash": "1e30"}}
        self.path.write_text(json.dumps(document), encoding="utf-8")

        with self.assertRaises(LoadFailedError):
            await self.gateway.load()

    async def test_successful_save_clears_last_error(self):
        with patch("vendtycoon.session.persistence.os.replace", side_effect=OSError("disk full")):
            await self.gateway.save(self.snapshot)

        self.assertTrue(await self.gateway.save(self.snapshot))
        self.assertIsNone(self.gateway.last_error)

    async def test_delete(self):
        self.assertFalse(await self.gateway.delete_saved_game())

        await self.gateway.save(self.snapshot)
        self.assertTrue(await self.gateway.delete_saved_game())
        self.assertFalse(self.path.exists())


class TestInMemoryPersistenceGateway(unittest.IsolatedAsyncioTestCase):
    """Test the in-memory gateway."""

    async def test_empty(self):
        gateway = InMemoryPersistenceGateway()

        self.assertFalse(await gateway.has_saved_game())
        self.assertIsNone(await gateway.load())
        self.assertFalse(await gateway.delete_saved_game())

    async def test_save_and_load(self):
        gateway = InMemoryPersistenceGateway()
        snapshot = Snapshot(cash="10", day_count=2)

        self.assertTrue(await gateway.save(snapshot))
        self.assertEqual(await gateway.load(), snapshot)

    def test_save_sync(self):
        gateway = InMemoryPersistenceGateway()

        self.assertTrue(gateway.save_sync(Snapshot(cash="1")))


if __name__ == '__main__':
    unittest.main()
