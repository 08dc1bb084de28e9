"""
Simulation clock and in-game time.

The clock is frame driven: the application loop feeds it the elapsed real
time every frame and it reports how many whole game hours have passed.
"""

from dataclasses import dataclass
from typing import Tuple

from .snapshot import HOURS_PER_DAY
from ..core.logging import get_logger


@dataclass(frozen=True)
class GameTime:
    """A point in game time, day 1 hour 0 being the start of a new game."""
    day: int = 1
    hour: int = 0

    @property
    def label(self) -> str:
        return f"Day {self.day}"

    @property
    def clock_label(self) -> str:
        """12-hour clock reading, e.g. "8:00 AM"."""
        period = "AM" if self.hour < 12 else "PM"
        hour = self.hour % 12 or 12
        return f"{hour}:00 {period}"

    @property
    def key(self) -> Tuple[int, int]:
        return (self.day, self.hour)

    def advance(self, hours: int = 1) -> 'GameTime':
        """Return the time ``hours`` later, rolling over into following days."""
        if hours < 0:
            raise ValueError("Game time cannot move backwards")
        total = self.hour + hours
        return GameTime(day=self.day + total // HOURS_PER_DAY, hour=total % HOURS_PER_DAY)


class SimulationClock:
    """
    Real-time to game-time accumulator.

    ``start`` is idempotent: calling it while running neither resets the
    partially accumulated hour nor adds a second tick source.
    """

    def __init__(self, seconds_per_game_hour: float = 12.5):
        if seconds_per_game_hour <= 0:
            raise ValueError("seconds_per_game_hour must be positive")

        self.seconds_per_game_hour = seconds_per_game_hour
        self.logger = get_logger("session.clock")

        self._running = False
        self._accumulated = 0.0
        self._ticks = 0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def ticks(self) -> int:
        """Whole game hours elapsed since creation or the last reset."""
        return self._ticks

    @property
    def progress(self) -> float:
        """Fraction of the current game hour already elapsed (0.0 - 1.0)."""
        return self._accumulated / self.seconds_per_game_hour

    def start(self) -> bool:
        """
        Start the clock.

        Returns:
            True if the clock was started, False if it was already running
        """
        if self._running:
            self.logger.debug("Clock already running, start ignored")
            return False
        self._running = True
        self.logger.debug("Clock started", extra={"ticks": self._ticks})
        return True

    def stop(self) -> bool:
        """
        Stop the clock, keeping the partial hour.

        Returns:
            True if the clock was running
        """
        if not self._running:
            return False
        self._running = False
        self.logger.debug("Clock stopped", extra={"ticks": self._ticks})
        return True

    def reset(self) -> None:
        """Stop the clock and clear all accumulated time."""
        self._running = False
        self._accumulated = 0.0
        self._ticks = 0

    def advance(self, dt: float) -> int:
        """
        Feed elapsed real time into the clock.

        Args:
            dt: Real seconds since the previous call

        Returns:
            Number of whole game hours that elapsed (0 while stopped)
        """
        if not self._running or dt <= 0:
            return 0

        self._accumulated += dt
        hours = int(self._accumulated // self.seconds_per_game_hour)
        if hours:
            self._accumulated -= hours * self.seconds_per_game_hour
            self._ticks += hours
        return hours
