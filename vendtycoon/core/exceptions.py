"""
Exception handling framework for Vending Tycoon.

Provides custom exception classes and error handling utilities for
consistent error management throughout the application.
"""

import sys
import traceback
from typing import Any, Callable, Dict, List, Optional, Type
from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class VendTycoonError(Exception):
    """
    Base exception class for all Vending Tycoon errors.

    Carries a severity, an error code and a context dictionary so that
    the error handler can log it in a structured way.
    """

    def __init__(self,
                 message: str,
                 error_code: Optional[str] = None,
                 severity: ErrorSeverity = ErrorSeverity.MEDIUM,
                 context: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        """
        Initialize the error.

        Args:
            message: Human-readable error message
            error_code: Unique error identifier
            severity: Error severity level
            context: Additional context information
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.severity = severity
        self.context = context or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
        }

    def __str__(self) -> str:
        parts = [f"{self.error_code}: {self.message}"]

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"Context: {context_str}")

        if self.cause:
            parts.append(f"Caused by: {self.cause}")

        return " | ".join(parts)


# Configuration errors
class ConfigurationError(VendTycoonError):
    """Raised when there's a configuration-related error."""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if config_key:
            context['config_key'] = config_key
        kwargs['context'] = context
        super().__init__(message, **kwargs)


class InvalidConfigValueError(ConfigurationError):
    """Raised when a configuration value is invalid."""

    def __init__(self, key: str, value: Any, expected: str, **kwargs):
        message = f"Invalid value '{value}' for config key '{key}'. Expected: {expected}"
        super().__init__(message, config_key=key, **kwargs)


# Session errors
class SessionError(VendTycoonError):
    """Base class for game session errors."""
    pass


class SessionStateError(SessionError):
    """Raised when the session is in an invalid phase for the requested operation."""

    def __init__(self, operation: str, phase: str, **kwargs):
        message = f"Cannot {operation} while session is {phase}"
        context = kwargs.get('context', {})
        context.update({'operation': operation, 'phase': phase})
        kwargs['context'] = context
        super().__init__(message, **kwargs)


class SnapshotError(SessionError):
    """Raised when a snapshot is invalid or cannot be decoded."""
    pass


# Persistence errors
class PersistenceError(VendTycoonError):
    """Base class for save/load errors."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if path:
            context['path'] = path
        kwargs['context'] = context
        super().__init__(message, **kwargs)


class SaveFailedError(PersistenceError):
    """Raised by storage backends when a snapshot could not be written."""
    pass


class LoadFailedError(PersistenceError):
    """Raised when a saved game exists but cannot be read back."""
    pass


# Resource errors
class ResourceError(VendTycoonError):
    """Base class for resource-related errors."""
    pass


class AssetLoadingError(ResourceError):
    """Raised when there's an error loading game assets."""

    def __init__(self, asset_name: str, **kwargs):
        message = f"Could not load asset '{asset_name}'"
        context = kwargs.get('context', {})
        context['asset_name'] = asset_name
        kwargs['context'] = context
        kwargs.setdefault('severity', ErrorSeverity.LOW)
        super().__init__(message, **kwargs)


ErrorCallback = Callable[[Exception, Dict[str, Any]], None]
CrashHandler = Callable[[Exception, bool], None]


class ErrorHandler:
    """
    Centralized error handling and reporting system.

    Provides utilities for error logging, crash reporting, and recovery.
    """

    def __init__(self):
        self._error_callbacks: List[ErrorCallback] = []
        self._crash_handlers: List[CrashHandler] = []

    def handle_error(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Handle an error with appropriate logging and recovery actions.

        Args:
            error: The exception to handle
            context: Additional context information
        """
        # Import here to avoid circular imports
        from .logging import get_logger

        logger = get_logger("error_handler")

        error_context = {
            "error_type": type(error).__name__,
            "error_message": str(error),
            "traceback": "".join(traceback.format_exception(
                type(error), error, error.__traceback__)),
        }

        if context:
            error_context.update(context)

        if isinstance(error, VendTycoonError):
            error_context.update({
                "error_code": error.error_code,
                "severity": error.severity.value,
                "error_context": error.context,
            })

            if error.severity in (ErrorSeverity.CRITICAL, ErrorSeverity.HIGH):
                logger.error("Vending Tycoon error occurred", extra=error_context)
            else:
                logger.warning("Vending Tycoon error occurred", extra=error_context)
        else:
            logger.error("Unexpected error occurred", extra=error_context)

        for callback in self._error_callbacks:
            try:
                callback(error, error_context)
            except Exception as callback_error:
                logger.error(f"Error in error callback: {callback_error}")

    def handle_crash(self, error: Exception, emergency_save: bool = True) -> None:
        """
        Handle a critical error that might cause the application to crash.

        Args:
            error: The critical exception
            emergency_save: Whether to attempt emergency save operations
        """
        from .logging import get_logger

        logger = get_logger("crash_handler")
        logger.critical("Critical error - application may crash", extra={
            "error_type": type(error).__name__,
            "error_message": str(error),
            "traceback": "".join(traceback.format_exception(
                type(error), error, error.__traceback__)),
            "emergency_save": emergency_save,
        })

        # Crash handlers get the first chance to persist the running game
        for handler in self._crash_handlers:
            try:
                handler(error, emergency_save)
            except Exception as handler_error:
                logger.critical(f"Error in crash handler: {handler_error}")

        if emergency_save:
            self._emergency_save()

    def _emergency_save(self) -> None:
        """Attempt to save user settings before crash."""
        try:
            from ..config import get_settings
            settings = get_settings()
            settings.save_settings()
        except Exception as e:
            print(f"Emergency save failed: {e}", file=sys.stderr)

    def register_error_callback(self, callback: ErrorCallback) -> None:
        """Register a callback to be called when errors occur."""
        self._error_callbacks.append(callback)

    def register_crash_handler(self, handler: CrashHandler) -> None:
        """Register a handler to be called during critical errors."""
        self._crash_handlers.append(handler)

    def setup_global_exception_handler(self) -> None:
        """Set up global exception handler for unhandled exceptions."""
        def exception_handler(exc_type: Type[BaseException],
                              exc_value: BaseException,
                              exc_traceback) -> None:
            if issubclass(exc_type, KeyboardInterrupt):
                sys.__excepthook__(exc_type, exc_value, exc_traceback)
                return

            self.handle_crash(exc_value, emergency_save=True)

            sys.__excepthook__(exc_type, exc_value, exc_traceback)

        sys.excepthook = exception_handler


# Global error handler instance
_error_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance."""
    global _error_handler
    if _error_handler is None:
        _error_handler = ErrorHandler()
    return _error_handler


def reset_error_handler() -> None:
    """Reset the global error handler instance."""
    global _error_handler
    _error_handler = None


def handle_error(error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
    """
    Handle an error using the global error handler.

    Args:
        error: The exception to handle
        context: Additional context information
    """
    get_error_handler().handle_error(error, context)


def handle_crash(error: Exception, emergency_save: bool = True) -> None:
    """
    Handle a critical error using the global error handler.

    Args:
        error: The critical exception
        emergency_save: Whether to attempt emergency save
    """
    get_error_handler().handle_crash(error, emergency_save)


def safe_execute(func, *args, **kwargs) -> Any:
    """
    Execute a function safely with automatic error handling.

    Returns:
        Function result or None if error occurred
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        handle_error(e, context={
            "function": getattr(func, "__name__", repr(func)),
            "call_args": str(args),
            "call_kwargs": str(kwargs),
        })
        return None


def setup_exception_handling() -> None:
    """Set up global exception handling."""
    error_handler = get_error_handler()
    error_handler.setup_global_exception_handler()
