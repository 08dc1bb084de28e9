"""
Application screens and their panels.
"""

from .base import Panel, Screen
from .dashboard import DashboardPanel
from .event_log import EventLogPanel
from .main_screen import MainScreen
from .menu_screen import MenuScreen

__all__ = [
    "Screen",
    "Panel",
    "MenuScreen",
    "MainScreen",
    "DashboardPanel",
    "EventLogPanel",
]
