"""
Persistence gateways for saved games.

A gateway stores at most one saved game. ``save`` reports failure through
its return value; ``load`` returns None when there is nothing saved and
raises LoadFailedError when a saved game exists but cannot be read.
"""

import asyncio
import json
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .snapshot import Snapshot
from ..core.exceptions import LoadFailedError, SaveFailedError, SnapshotError
from ..core.logging import get_logger


SAVE_FILE_KIND = "vendtycoon_save"


class PersistenceGateway(ABC):
    """Storage for a single saved game."""

    @abstractmethod
    async def save(self, snapshot: Snapshot) -> bool:
        """
        Persist ``snapshot``, replacing any previous save.

        Returns:
            True on success, False on failure (never raises)
        """

    @abstractmethod
    async def load(self) -> Optional[Snapshot]:
        """
        Read the saved game.

        Returns:
            The saved snapshot, or None if no game was saved

        Raises:
            LoadFailedError: If a saved game exists but is unreadable
        """

    @abstractmethod
    async def has_saved_game(self) -> bool:
        """Whether a saved game exists."""

    @abstractmethod
    async def delete_saved_game(self) -> bool:
        """Remove the saved game. Returns True if one was removed."""


class JsonFilePersistenceGateway(PersistenceGateway):
    """
    Saves the game as a JSON document on disk.

    Blocking file I/O runs in a worker thread so the UI loop keeps
    rendering while a save is in flight. The ``*_sync`` variants exist for
    the crash handler and the command line tools.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.last_error: Optional[SaveFailedError] = None
        self.logger = get_logger("session.persistence")

    # Async API
    async def save(self, snapshot: Snapshot) -> bool:
        return await asyncio.to_thread(self.save_sync, snapshot)

    async def load(self) -> Optional[Snapshot]:
        return await asyncio.to_thread(self.load_sync)

    async def has_saved_game(self) -> bool:
        return await asyncio.to_thread(self.has_saved_game_sync)

    async def delete_saved_game(self) -> bool:
        return await asyncio.to_thread(self.delete_saved_game_sync)

    # Blocking implementation
    def save_sync(self, snapshot: Snapshot) -> bool:
        document = {
            "kind": SAVE_FILE_KIND,
            "saved_at": datetime.now().isoformat(timespec="seconds"),
            "snapshot": snapshot.to_dict(),
        }

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".save-", suffix=".json",
                                            dir=str(self.path.parent))
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            # Readers never observe a half-written save
            os.replace(tmp_name, self.path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as e:
            self.last_error = SaveFailedError("Saved game could not be written",
                                              path=str(self.path), cause=e)
            self.logger.error("Failed to save game", extra={
                "path": str(self.path),
                "error": str(e),
                "error_code": self.last_error.error_code,
            })
            return False
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass

        self.last_error = None
        self.logger.info("Game saved", extra={
            "path": str(self.path),
            "day": snapshot.day_count,
            "hour": snapshot.hour_of_day,
        })
        return True

    def load_sync(self) -> Optional[Snapshot]:
        if not self.path.exists():
            self.logger.debug("No saved game", extra={"path": str(self.path)})
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise LoadFailedError("Saved game could not be read",
                                  path=str(self.path), cause=e)

        snapshot = self._decode(document)
        self.logger.info("Game loaded", extra={
            "path": str(self.path),
            "day": snapshot.day_count,
            "hour": snapshot.hour_of_day,
        })
        return snapshot

    def has_saved_game_sync(self) -> bool:
        return self.path.is_file()

    def delete_saved_game_sync(self) -> bool:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        self.logger.info("Saved game deleted", extra={"path": str(self.path)})
        return True

    def read_metadata(self) -> Optional[Dict[str, Any]]:
        """Return the save document's header fields without decoding the snapshot."""
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise LoadFailedError("Saved game could not be read",
                                  path=str(self.path), cause=e)
        if not isinstance(document, dict):
            raise LoadFailedError("Saved game is not a save file", path=str(self.path))
        return {k: v for k, v in document.items() if k != "snapshot"}

    def _decode(self, document: Any) -> Snapshot:
        if not isinstance(document, dict) or document.get("kind") != SAVE_FILE_KIND:
            raise LoadFailedError("Saved game is not a save file", path=str(self.path))
        try:
            return Snapshot.from_dict(document.get("snapshot"))
        except SnapshotError as e:
            raise LoadFailedError("Saved game is corrupted",
                                  path=str(self.path), cause=e)


class InMemoryPersistenceGateway(PersistenceGateway):
    """
    Keeps the saved game in memory for the lifetime of the process.

    The snapshot is round-tripped through its dictionary form so a loaded
    game never shares state with the one that was saved.
    """

    def __init__(self, snapshot: Optional[Snapshot] = None):
        self._data: Optional[Dict[str, Any]] = snapshot.to_dict() if snapshot else None

    async def save(self, snapshot: Snapshot) -> bool:
        self._data = snapshot.to_dict()
        return True

    async def load(self) -> Optional[Snapshot]:
        if self._data is None:
            return None
        return Snapshot.from_dict(self._data)

    async def has_saved_game(self) -> bool:
        return self._data is not None

    async def delete_saved_game(self) -> bool:
        existed = self._data is not None
        self._data = None
        return existed

    def save_sync(self, snapshot: Snapshot) -> bool:
        self._data = snapshot.to_dict()
        return True
