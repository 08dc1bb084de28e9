"""
Vending Tycoon - a vending machine business simulation.

Game session lifecycle, simulation clock and a pygame presentation layer.
"""

__version__ = "0.1.0"

from .config import Config, Settings
from .session import GameSession, create_session

__all__ = [
    "Config",
    "Settings",
    "GameSession",
    "create_session",
]
