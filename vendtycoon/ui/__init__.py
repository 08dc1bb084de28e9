"""
Pygame presentation layer: application shell, screens and widgets.
"""

from .app import VendingTycoonApp
from .assets import AssetCache
from .dialogs import ConfirmDialog
from .notifications import Notification, NotificationCenter, NotificationKind
from .overlay import PerformanceOverlay
from .theme import Color, FontCache, UITheme

__all__ = [
    "VendingTycoonApp",
    "AssetCache",
    "ConfirmDialog",
    "Notification",
    "NotificationCenter",
    "NotificationKind",
    "PerformanceOverlay",
    "Color",
    "FontCache",
    "UITheme",
]
