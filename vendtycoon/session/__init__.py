"""
Game session: snapshot model, simulation clock, controller, persistence
and the lifecycle state machine that ties them together.
"""

from typing import Optional

from .snapshot import MachineRef, MachineStatus, Snapshot, to_money
from .clock import GameTime, SimulationClock
from .controller import GameController, LogEntry, LogLevel
from .persistence import (
    PersistenceGateway, JsonFilePersistenceGateway, InMemoryPersistenceGateway
)
from .lifecycle import GameSession, SessionPhase, LoadStatus, LoadResult
from ..config import Settings, get_settings


def create_session(settings: Optional[Settings] = None) -> GameSession:
    """
    Build a game session wired from settings.

    Args:
        settings: Settings to use, the global settings if not provided

    Returns:
        A session in the NOT_STARTED phase
    """
    settings = settings or get_settings()

    controller = GameController(
        starting_cash=settings.starting_cash,
        clock=SimulationClock(settings.seconds_per_game_hour),
        log_history_limit=settings.log_history_limit,
    )

    if settings.ephemeral_saves:
        gateway: PersistenceGateway = InMemoryPersistenceGateway()
    else:
        gateway = JsonFilePersistenceGateway(settings.save_file)

    return GameSession(controller, gateway)


__all__ = [
    "MachineRef",
    "MachineStatus",
    "Snapshot",
    "to_money",
    "GameTime",
    "SimulationClock",
    "GameController",
    "LogEntry",
    "LogLevel",
    "PersistenceGateway",
    "JsonFilePersistenceGateway",
    "InMemoryPersistenceGateway",
    "GameSession",
    "SessionPhase",
    "LoadStatus",
    "LoadResult",
    "create_session",
]
