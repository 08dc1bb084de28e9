"""
Settings module for Vending Tycoon.

Provides convenient access to configuration settings with validation and type hints.
"""

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .config import get_config, Config
from ..core.exceptions import InvalidConfigValueError


class Settings:
    """
    High-level settings interface with validation and type safety.

    Numeric values are clamped to sane ranges; values that cannot be
    interpreted at all raise InvalidConfigValueError.
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize settings with optional config instance.

        Args:
            config: Optional Config instance, uses global if not provided
        """
        self._config = config or get_config()

    @property
    def config(self) -> Config:
        return self._config

    def _number(self, key: str, default: float, cast=float) -> Any:
        value = self._config.get(key, default)
        try:
            return cast(value)
        except (TypeError, ValueError) as e:
            raise InvalidConfigValueError(key, value, "a number", cause=e)

    # Application settings
    @property
    def app_name(self) -> str:
        return self._config.get("app.name", "Vending Tycoon")

    @property
    def app_version(self) -> str:
        return self._config.get("app.version", "0.1.0")

    @property
    def debug_mode(self) -> bool:
        """Debug mode enabled."""
        return bool(self._config.get("app.debug", False))

    @property
    def log_level(self) -> str:
        """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""
        level = str(self._config.get("app.log_level", "INFO")).upper()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        return level if level in valid_levels else "INFO"

    @property
    def target_fps(self) -> int:
        """Target frames per second."""
        fps = self._number("app.fps_target", 60, int)
        return max(1, min(fps, 240))

    # Window settings
    @property
    def window_width(self) -> int:
        width = self._number("app.window.width", 480, int)
        return max(320, min(width, 7680))

    @property
    def window_height(self) -> int:
        height = self._number("app.window.height", 854, int)
        return max(480, min(height, 4320))

    @property
    def window_size(self) -> Tuple[int, int]:
        """Window size as (width, height) tuple."""
        return (self.window_width, self.window_height)

    @property
    def fullscreen(self) -> bool:
        return bool(self._config.get("app.window.fullscreen", False))

    @property
    def resizable(self) -> bool:
        return bool(self._config.get("app.window.resizable", True))

    # Game settings
    @property
    def starting_cash(self) -> Decimal:
        """Cash a new game starts with."""
        value = self._config.get("game.starting_cash", "2000.00")
        try:
            cash = Decimal(str(value))
            if cash.is_finite():
                return cash.quantize(Decimal("0.01"))
        except InvalidOperation as e:
            raise InvalidConfigValueError("game.starting_cash", value, "a decimal amount", cause=e)
        raise InvalidConfigValueError("game.starting_cash", value, "a finite amount")

    @property
    def seconds_per_game_hour(self) -> float:
        """Real seconds that make up one in-game hour."""
        seconds = self._number("game.seconds_per_game_hour", 12.5)
        return max(0.1, min(seconds, 3600.0))

    @property
    def log_history_limit(self) -> int:
        """Maximum number of event log entries kept in memory."""
        limit = self._number("game.log_history_limit", 100, int)
        return max(10, min(limit, 1000))

    # Save settings
    @property
    def save_file(self) -> Path:
        """Location of the saved game."""
        path = self._config.get("save.file")
        if path:
            return Path(path).expanduser()
        return self._config.user_config_dir / "savegame.json"

    @property
    def ephemeral_saves(self) -> bool:
        """Keep saved games in memory only."""
        return bool(self._config.get("save.ephemeral", False))

    # UI settings
    @property
    def notification_seconds(self) -> float:
        """How long a notification stays on screen."""
        seconds = self._number("ui.notification_seconds", 2.0)
        return max(0.5, min(seconds, 10.0))

    @property
    def assets_dir(self) -> Path:
        """Directory the UI loads images from."""
        path = self._config.get("ui.assets_dir")
        if path:
            return Path(path).expanduser()
        return Path(__file__).resolve().parent.parent / "assets" / "images"

    @property
    def show_performance_overlay(self) -> bool:
        return bool(self._config.get("ui.show_performance_overlay", False))

    # Convenience methods
    def update_setting(self, key: str, value: Any) -> None:
        """
        Update a setting value.

        Args:
            key: Setting key in dot notation
            value: New value
        """
        self._config.set(key, value)

    def save_settings(self) -> None:
        """Save current settings to user config file."""
        self._config.save()

    def reset_to_defaults(self) -> None:
        self._config.reset_to_defaults()

    def get_all_settings(self) -> Dict[str, Any]:
        return self._config.get_all()

    def is_development_mode(self) -> bool:
        """Check if running in development mode."""
        return self.debug_mode or self.log_level == "DEBUG"

    def get_display_info(self) -> Dict[str, Any]:
        """Get display-related settings."""
        return {
            "width": self.window_width,
            "height": self.window_height,
            "fullscreen": self.fullscreen,
            "resizable": self.resizable,
            "fps_target": self.target_fps,
        }


# Global settings instance
_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings_instance
    _settings_instance = settings


def reset_settings() -> None:
    """Reset the global settings instance."""
    global _settings_instance
    _settings_instance = None
