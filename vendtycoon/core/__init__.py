"""
Core system components: structured logging and error handling.
"""

from .exceptions import (
    ErrorSeverity,
    VendTycoonError,
    ConfigurationError,
    InvalidConfigValueError,
    SessionError,
    SessionStateError,
    SnapshotError,
    PersistenceError,
    SaveFailedError,
    LoadFailedError,
    ResourceError,
    AssetLoadingError,
    ErrorHandler,
    get_error_handler,
    handle_error,
    handle_crash,
    safe_execute,
    setup_exception_handling,
)
from .logging import bind_game_clock, get_logger, configure_logging, shutdown_logging

__all__ = [
    "ErrorSeverity",
    "VendTycoonError",
    "ConfigurationError",
    "InvalidConfigValueError",
    "SessionError",
    "SessionStateError",
    "SnapshotError",
    "PersistenceError",
    "SaveFailedError",
    "LoadFailedError",
    "ResourceError",
    "AssetLoadingError",
    "ErrorHandler",
    "get_error_handler",
    "handle_error",
    "handle_crash",
    "safe_execute",
    "setup_exception_handling",
    "get_logger",
    "bind_game_clock",
    "configure_logging",
    "shutdown_logging",
]
