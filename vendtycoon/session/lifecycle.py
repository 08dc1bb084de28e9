"""
Game session lifecycle.

GameSession is the state machine the screens talk to. It wraps an injected
GameController and PersistenceGateway:

    NOT_STARTED -> RUNNING <-> PAUSED -> EXITED

Saving never changes the phase; it records ``last_saved_at`` instead.
"""

import time
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .controller import GameController, LogEntry
from .persistence import PersistenceGateway
from .snapshot import MachineRef, Snapshot
from ..core.exceptions import PersistenceError, SessionStateError, SnapshotError
from ..core.logging import get_logger


class SessionPhase(Enum):
    """Lifecycle phases of a game session."""
    NOT_STARTED = "not_started"
    RUNNING = "running"
    PAUSED = "paused"
    EXITED = "exited"


class LoadStatus(Enum):
    """Outcome of loading the saved game."""
    LOADED = "loaded"
    NO_SAVED_GAME = "no_saved_game"
    FAILED = "failed"


@dataclass(frozen=True)
class LoadResult:
    status: LoadStatus
    snapshot: Optional[Snapshot] = None
    error: Optional[Exception] = None

    @property
    def loaded(self) -> bool:
        return self.status == LoadStatus.LOADED


PhaseListener = Callable[[SessionPhase, SessionPhase], None]


class GameSession:
    """
    Session lifecycle state machine.

    All clock and state operations are delegated to the controller; the
    session only decides which of them are legal in the current phase and
    routes save/load through the gateway.
    """

    def __init__(self, controller: GameController, gateway: PersistenceGateway):
        """
        Args:
            controller: Owner of the clock and live game state
            gateway: Storage for the saved game
        """
        self.controller = controller
        self.gateway = gateway
        self.logger = get_logger("session.lifecycle")

        self._phase = SessionPhase.NOT_STARTED
        self._phase_listeners: List[PhaseListener] = []
        self.last_saved_at: Optional[float] = None

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    # Observable fields, read through from the controller
    @property
    def cash(self) -> Decimal:
        return self.controller.cash

    @property
    def reputation(self) -> int:
        return self.controller.reputation

    @property
    def day_count(self) -> int:
        return self.controller.day_count

    @property
    def hour_of_day(self) -> int:
        return self.controller.hour_of_day

    @property
    def alert_count(self) -> int:
        return self.controller.alert_count

    @property
    def machines(self) -> Tuple[MachineRef, ...]:
        return self.controller.machines

    @property
    def is_running(self) -> bool:
        return self.controller.is_running

    @property
    def log_history(self) -> List[LogEntry]:
        return self.controller.log_history

    def snapshot(self) -> Snapshot:
        return self.controller.snapshot()

    def game_clock(self) -> Optional[Tuple[int, int]]:
        """The current (day, hour) while a game is in progress, otherwise None."""
        if self._phase in (SessionPhase.RUNNING, SessionPhase.PAUSED):
            return self.controller.day_count, self.controller.hour_of_day
        return None

    def update(self, dt: float) -> int:
        """Feed frame time to the controller; returns game hours processed."""
        return self.controller.update(dt)

    # Clock control
    def start(self) -> None:
        """Start or resume play. Idempotent while running."""
        if self._phase == SessionPhase.EXITED:
            raise SessionStateError("start", self._phase.value)
        self.controller.start()
        self._set_phase(SessionPhase.RUNNING)

    def toggle(self) -> bool:
        """
        Pause a running session or resume a paused one.

        Returns:
            Whether the session is running afterwards
        """
        if self._phase == SessionPhase.EXITED:
            raise SessionStateError("toggle", self._phase.value)
        running = self.controller.toggle()
        self._set_phase(SessionPhase.RUNNING if running else SessionPhase.PAUSED)
        return running

    def stop(self) -> None:
        """Stop the clock. Legal in every phase."""
        self.controller.stop()
        if self._phase == SessionPhase.RUNNING:
            self._set_phase(SessionPhase.PAUSED)

    def reset(self) -> None:
        """Discard the current game and return to the new-game baseline."""
        self.controller.reset()
        self.last_saved_at = None
        self._set_phase(SessionPhase.NOT_STARTED)

    def new_game(self) -> None:
        """Reset, then start the clock."""
        self.reset()
        self.start()

    def load_snapshot(self, snapshot: Snapshot) -> None:
        """Replace the live state with ``snapshot``, leaving the clock stopped."""
        self.controller.load_snapshot(snapshot)
        self._set_phase(SessionPhase.PAUSED)

    # Persistence
    async def save(self) -> bool:
        """
        Save the current state.

        Returns:
            True on success; False on failure, with live state untouched
        """
        snapshot = self.controller.snapshot()
        try:
            saved = await self.gateway.save(snapshot)
        except Exception as e:
            self.logger.error("Save raised instead of reporting failure", extra={
                "error": str(e),
                "error_type": type(e).__name__,
            })
            saved = False

        if saved:
            self.last_saved_at = time.time()
        self.logger.info("Save finished", extra={
            "saved": saved,
            "day": snapshot.day_count,
            "hour": snapshot.hour_of_day,
        })
        return saved

    async def fetch_saved_game(self) -> LoadResult:
        """
        Read the saved game without touching live state.

        Callers that may be abandoned while the read is pending apply the
        result themselves with ``load_snapshot``.
        """
        try:
            snapshot = await self.gateway.load()
        except (PersistenceError, SnapshotError) as e:
            self.logger.warning("Saved game could not be loaded", extra={"error": str(e)})
            return LoadResult(LoadStatus.FAILED, error=e)

        if snapshot is None:
            self.logger.info("No saved game found")
            return LoadResult(LoadStatus.NO_SAVED_GAME)

        return LoadResult(LoadStatus.LOADED, snapshot=snapshot)

    async def load_saved_game(self) -> LoadResult:
        """
        Load the saved game into the session without starting the clock.

        Live state is only replaced when a snapshot was actually loaded.
        """
        result = await self.fetch_saved_game()
        if result.loaded:
            self.load_snapshot(result.snapshot)
        return result

    async def has_saved_game(self) -> bool:
        try:
            return await self.gateway.has_saved_game()
        except Exception as e:
            self.logger.warning("Saved game lookup failed", extra={"error": str(e)})
            return False

    async def delete_saved_game(self) -> bool:
        return await self.gateway.delete_saved_game()

    async def exit_to_menu(self) -> bool:
        """
        Stop the clock, save, and mark the session exited.

        The clock is stopped before the first await so no tick can land
        while the save is in flight.

        Returns:
            Whether the save succeeded
        """
        self.stop()
        saved = await self.save()
        self._set_phase(SessionPhase.EXITED)
        return saved

    # Listeners
    def add_phase_listener(self, listener: PhaseListener) -> None:
        """Register a callback invoked with (old_phase, new_phase) on every change."""
        self._phase_listeners.append(listener)

    def remove_phase_listener(self, listener: PhaseListener) -> None:
        if listener in self._phase_listeners:
            self._phase_listeners.remove(listener)

    def _set_phase(self, phase: SessionPhase) -> None:
        old_phase = self._phase
        if old_phase == phase:
            return
        self._phase = phase
        self.logger.debug("Session phase changed", extra={
            "old_phase": old_phase.value,
            "new_phase": phase.value,
        })
        for listener in self._phase_listeners:
            try:
                listener(old_phase, phase)
            except Exception as e:
                self.logger.error("Error in phase listener", extra={"error": str(e)})
