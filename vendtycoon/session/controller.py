"""
Game controller.

Owns the live session state, the simulation clock and the event log.
Economic rules plug in as systems: callables that receive the current
snapshot and the new game time once per game hour and return the next
snapshot.
"""

import time
from collections import deque
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Deque, List, Optional, Tuple

from .clock import GameTime, SimulationClock
from .snapshot import MachineRef, Snapshot
from ..core.exceptions import SessionStateError
from ..core.logging import get_logger


class LogLevel(Enum):
    """Severity of an event log entry."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class LogEntry:
    """A player-facing event, stamped with game and wall-clock time."""
    message: str
    level: LogLevel = LogLevel.INFO
    day: int = 1
    hour: int = 0
    timestamp: float = field(default_factory=time.time)

    @property
    def prefix(self) -> str:
        return f"Day {self.day}, {self.hour:02d}:00"


SessionSystem = Callable[[Snapshot, GameTime], Snapshot]
StateListener = Callable[[Snapshot], None]


class GameController:
    """
    Session controller for a single game.

    Exposes start/stop/toggle of the simulation clock, reset to a new game,
    loading a snapshot wholesale, and read-only observable fields.
    """

    def __init__(self,
                 starting_cash: Any = Decimal("2000.00"),
                 clock: Optional[SimulationClock] = None,
                 log_history_limit: int = 100):
        """
        Initialize the controller with a fresh game.

        Args:
            starting_cash: Baseline cash for new games
            clock: Simulation clock, a 12.5 s/hour clock if not provided
            log_history_limit: Maximum number of event log entries kept
        """
        self.logger = get_logger("session.controller")

        self._initial_state = Snapshot.initial(starting_cash)
        self._state = self._initial_state
        self.clock = clock or SimulationClock()

        self._log: Deque[LogEntry] = deque(maxlen=log_history_limit)
        self._systems: List[Tuple[str, SessionSystem]] = []
        self._state_listeners: List[StateListener] = []

    # Observable fields
    @property
    def starting_cash(self) -> Decimal:
        return self._initial_state.cash

    @property
    def cash(self) -> Decimal:
        return self._state.cash

    @property
    def reputation(self) -> int:
        return self._state.reputation

    @property
    def day_count(self) -> int:
        return self._state.day_count

    @property
    def hour_of_day(self) -> int:
        return self._state.hour_of_day

    @property
    def alert_count(self) -> int:
        return self._state.alerts

    @property
    def machines(self) -> Tuple[MachineRef, ...]:
        return self._state.machines

    @property
    def game_time(self) -> GameTime:
        return GameTime(self._state.day_count, self._state.hour_of_day)

    @property
    def is_running(self) -> bool:
        return self.clock.is_running

    @property
    def log_history(self) -> List[LogEntry]:
        """Event log, oldest first."""
        return list(self._log)

    def snapshot(self) -> Snapshot:
        """Current state as an immutable snapshot."""
        return self._state

    # Lifecycle
    def start(self) -> None:
        """Start the simulation clock. Does nothing if it is already running."""
        if not self.clock.start():
            return
        self.add_log_entry("Simulation started")
        self.logger.info("Simulation started", extra={
            "day": self.day_count,
            "hour": self.hour_of_day,
        })

    def stop(self) -> None:
        """Stop the simulation clock; safe to call in any state."""
        if self.clock.stop():
            self.add_log_entry("Simulation paused")
            self.logger.info("Simulation stopped", extra={
                "day": self.day_count,
                "hour": self.hour_of_day,
            })

    def toggle(self) -> bool:
        """
        Pause if running, start otherwise.

        Returns:
            Whether the clock is running afterwards
        """
        if self.is_running:
            self.stop()
        else:
            self.start()
        return self.is_running

    def reset(self) -> None:
        """Stop the clock and return to the baseline state of a new game."""
        self.stop()
        self.clock.reset()
        self._log.clear()
        self._set_state(self._initial_state)
        self.add_log_entry("New game started", LogLevel.SUCCESS)
        self.logger.info("Game reset", extra={"cash": str(self.cash)})

    def load_snapshot(self, snapshot: Snapshot) -> None:
        """
        Replace the live state with ``snapshot``.

        The clock is left stopped; callers start it when play should resume.
        """
        self.stop()
        self.clock.reset()
        self._set_state(snapshot)
        self.add_log_entry("Game loaded", LogLevel.SUCCESS)
        self.logger.info("Snapshot loaded", extra={
            "day": snapshot.day_count,
            "hour": snapshot.hour_of_day,
            "machine_count": len(snapshot.machines),
        })

    # Ticking
    def update(self, dt: float) -> int:
        """
        Advance the clock by ``dt`` real seconds.

        Returns:
            Number of game hours processed
        """
        hours = self.clock.advance(dt)
        for _ in range(hours):
            self._tick()
        return hours

    def _tick(self) -> None:
        now = self.game_time.advance(1)
        state = self._state.with_time(now.day, now.hour)

        for name, system in self._systems:
            try:
                result = system(state, now)
                if result.time_key < state.time_key:
                    raise SessionStateError(f"rewind time in system '{name}'", "running")
                state = result
            except Exception as e:
                self.logger.error("Error in session system", extra={
                    "system": name,
                    "error": str(e),
                })

        new_day = now.day != self._state.day_count
        self._set_state(state)
        if new_day:
            self.add_log_entry(f"Day {now.day} begins")

    def add_system(self, system: SessionSystem, name: Optional[str] = None) -> None:
        """Register a per-hour rule; systems run in registration order."""
        self._systems.append((name or getattr(system, "__name__", repr(system)), system))

    def remove_system(self, system: SessionSystem) -> None:
        self._systems = [(n, s) for n, s in self._systems if s is not system]

    # Event log
    def add_log_entry(self, message: str, level: LogLevel = LogLevel.INFO) -> LogEntry:
        entry = LogEntry(message, level, self.day_count, self.hour_of_day)
        self._log.append(entry)
        return entry

    # Listeners
    def add_state_listener(self, listener: StateListener) -> None:
        """Register a callback invoked with every new snapshot."""
        self._state_listeners.append(listener)

    def remove_state_listener(self, listener: StateListener) -> None:
        if listener in self._state_listeners:
            self._state_listeners.remove(listener)

    def _set_state(self, state: Snapshot) -> None:
        self._state = state
        for listener in self._state_listeners:
            try:
                listener(state)
            except Exception as e:
                self.logger.error("Error in state listener", extra={"error": str(e)})
