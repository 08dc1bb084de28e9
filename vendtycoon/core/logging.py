"""
Structured logging for Vending Tycoon.

Every record can carry the in-game time it happened at. Records logged
with ``day`` and ``hour`` extras keep them; otherwise the game clock bound
with ``bind_game_clock`` stamps them while a session is active. Console
output is human readable, rotating files can be human or JSON.
"""

import json
import logging
import logging.handlers
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Union


GameClock = Callable[[], Optional[Tuple[int, int]]]

# Attributes every LogRecord carries; anything else arrived through ``extra``
_RECORD_ATTRIBUTES = frozenset({
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'exc_info', 'exc_text',
    'stack_info', 'taskName', 'message', 'asctime', 'elapsed_time',
})

_GAME_TIME_KEYS = ("day", "hour")

_LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
_RESET_COLOR = "\033[0m"


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
        return value
    except (TypeError, ValueError):
        return str(value)


def _game_time(record: logging.LogRecord) -> Optional[Tuple[Any, Any]]:
    day = getattr(record, "day", None)
    hour = getattr(record, "hour", None)
    if day is None or hour is None:
        return None
    return day, hour


class StructuredFormatter(logging.Formatter):
    """
    Formats records as a single human-readable line or a JSON object.

    The in-game time is rendered as a ``[Day N HH:00]`` tag in human output
    and as a ``game_time`` object in JSON; it is not repeated among the
    extra fields.
    """

    def __init__(self, fmt_type: str = "human", include_extra: bool = True,
                 use_colors: Optional[bool] = None):
        """
        Args:
            fmt_type: "human" or "json"
            include_extra: Include fields passed through ``extra``
            use_colors: Colour the level name, defaults to stderr being a TTY
        """
        super().__init__()
        self.fmt_type = fmt_type
        self.include_extra = include_extra
        if use_colors is None:
            use_colors = hasattr(sys.stderr, "isatty") and sys.stderr.isatty()
        self.use_colors = use_colors

    def extra_fields(self, record: logging.LogRecord) -> Dict[str, Any]:
        skip = set(_RECORD_ATTRIBUTES)
        if _game_time(record) is not None:
            skip.update(_GAME_TIME_KEYS)
        return {key: _jsonable(value) for key, value in record.__dict__.items()
                if key not in skip}

    def format(self, record: logging.LogRecord) -> str:
        if self.fmt_type == "json":
            return self._format_json(record)
        return self._format_human(record)

    def _format_json(self, record: logging.LogRecord) -> str:
        data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        elapsed = getattr(record, "elapsed_time", None)
        if elapsed is not None:
            data["elapsed"] = round(elapsed, 3)

        game_time = _game_time(record)
        if game_time is not None:
            data["game_time"] = {"day": _jsonable(game_time[0]), "hour": _jsonable(game_time[1])}

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        if self.include_extra:
            extra = self.extra_fields(record)
            if extra:
                data["extra"] = extra

        return json.dumps(data, ensure_ascii=False)

    def _format_human(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname
        if self.use_colors and level in _LEVEL_COLORS:
            level_text = f"{_LEVEL_COLORS[level]}{level:<8}{_RESET_COLOR}"
        else:
            level_text = f"{level:<8}"

        parts = [timestamp, level_text, f"{record.name:<28}"]

        game_time = _game_time(record)
        if game_time is not None:
            day, hour = game_time
            try:
                parts.append(f"[Day {day} {int(hour):02d}:00]")
            except (TypeError, ValueError):
                parts.append(f"[Day {day} {hour}]")

        parts.append(record.getMessage())
        line = " ".join(parts)

        if level == "DEBUG":
            line += f" [{record.module}:{record.funcName}:{record.lineno}]"

        if self.include_extra:
            extra = self.extra_fields(record)
            if extra:
                line += " | " + ", ".join(f"{k}={v}" for k, v in extra.items())

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


class PerformanceFilter(logging.Filter):
    """Tags records with seconds elapsed since logging was configured."""

    def __init__(self):
        super().__init__()
        self.start_time = time.time()

    def filter(self, record: logging.LogRecord) -> bool:
        record.elapsed_time = time.time() - self.start_time
        return True


class GameClockFilter(logging.Filter):
    """Stamps ``day``/``hour`` from the bound game clock when a record lacks them."""

    def __init__(self):
        super().__init__()
        self.clock: Optional[GameClock] = None

    def filter(self, record: logging.LogRecord) -> bool:
        if self.clock is None or any(hasattr(record, key) for key in _GAME_TIME_KEYS):
            return True
        current = self.clock()
        if current is not None:
            record.day, record.hour = current
        return True


class LoggerManager:
    """Configures the root logger and hands out ``vendtycoon.*`` loggers."""

    def __init__(self):
        self._loggers: Dict[str, logging.Logger] = {}
        self._configured = False
        self._log_dir: Optional[Path] = None
        self._clock_filter = GameClockFilter()

    def configure(self,
                  log_level: str = "INFO",
                  log_dir: Optional[Union[str, Path]] = None,
                  console_output: bool = True,
                  file_output: bool = True,
                  json_format: bool = False,
                  max_file_size: int = 5 * 1024 * 1024,
                  backup_count: int = 3) -> None:
        """
        Configure the logging system once.

        Args:
            log_level: Minimum level for the console and the root logger
            log_dir: Directory for log files, ``~/.vendtycoon/logs`` by default
            console_output: Log to stderr
            file_output: Write ``vendtycoon.log`` and ``vendtycoon_errors.log``
            json_format: Use JSON lines in ``vendtycoon.log``
            max_file_size: Rotation size of each log file in bytes
            backup_count: Rotated files to keep
        """
        if self._configured:
            return

        self._log_dir = Path(log_dir) if log_dir else Path.home() / ".vendtycoon" / "logs"
        level = getattr(logging, log_level.upper(), logging.INFO)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        filters = [PerformanceFilter(), self._clock_filter]

        if console_output:
            self._add_handler(root_logger, logging.StreamHandler(sys.stderr), level,
                              StructuredFormatter("human"), filters)

        if file_output:
            self._log_dir.mkdir(parents=True, exist_ok=True)

            main_format = StructuredFormatter("json" if json_format else "human", use_colors=False)
            self._add_handler(root_logger,
                              self._rotating_file("vendtycoon.log", max_file_size, backup_count),
                              logging.DEBUG, main_format, filters)
            self._add_handler(root_logger,
                              self._rotating_file("vendtycoon_errors.log", max_file_size, backup_count),
                              logging.ERROR, StructuredFormatter("human", use_colors=False), filters)

        self._configured = True

        self.get_logger("logging").info("Logging system configured", extra={
            "log_level": log_level,
            "log_dir": str(self._log_dir),
            "console_output": console_output,
            "file_output": file_output,
            "json_format": json_format,
        })

    def _rotating_file(self, filename: str, max_file_size: int,
                       backup_count: int) -> logging.Handler:
        return logging.handlers.RotatingFileHandler(
            self._log_dir / filename,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8',
        )

    @staticmethod
    def _add_handler(root_logger: logging.Logger, handler: logging.Handler, level: int,
                     formatter: logging.Formatter, filters) -> None:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        for log_filter in filters:
            handler.addFilter(log_filter)
        root_logger.addHandler(handler)

    def get_logger(self, name: str) -> logging.Logger:
        """Return the logger ``vendtycoon.<name>``."""
        if name not in self._loggers:
            self._loggers[name] = logging.getLogger(f"vendtycoon.{name}")
        return self._loggers[name]

    def bind_game_clock(self, clock: Optional[GameClock]) -> None:
        """
        Set the callable that reports the current ``(day, hour)``.

        It returns None while no game is active. Pass None to unbind.
        """
        self._clock_filter.clock = clock

    def shutdown(self) -> None:
        if self._configured:
            self.get_logger("logging").info("Shutting down logging system")
        self._clock_filter.clock = None
        logging.shutdown()
        self._configured = False

    @property
    def is_configured(self) -> bool:
        return self._configured


# Global logger manager instance
_logger_manager: Optional[LoggerManager] = None


def get_logger_manager() -> LoggerManager:
    """Get the global logger manager instance."""
    global _logger_manager
    if _logger_manager is None:
        _logger_manager = LoggerManager()
    return _logger_manager


def get_logger(name: str) -> logging.Logger:
    """Get the ``vendtycoon.<name>`` logger."""
    return get_logger_manager().get_logger(name)


def bind_game_clock(clock: Optional[GameClock]) -> None:
    """Stamp log records with the game time reported by ``clock``."""
    get_logger_manager().bind_game_clock(clock)


def configure_logging(log_level: Optional[str] = None, **kwargs) -> None:
    """
    Configure the logging system, filling unspecified options from settings.

    Args:
        log_level: Minimum log level, defaults to the configured level
        **kwargs: Additional LoggerManager.configure options
    """
    # Import here to avoid circular imports
    from ..config import get_settings

    settings = get_settings()

    kwargs.setdefault('console_output', True)
    kwargs.setdefault('file_output', not settings.is_development_mode())
    kwargs.setdefault('json_format', False)

    get_logger_manager().configure(
        log_level=log_level or settings.log_level,
        **kwargs
    )


def shutdown_logging() -> None:
    """Shutdown the logging system."""
    get_logger_manager().shutdown()
