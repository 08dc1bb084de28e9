"""
Main entry point for Vending Tycoon.

This module provides the command line interface, application
initialization and the saved-game utility commands.
"""

import sys
import argparse
from pathlib import Path
from typing import Optional, Tuple

from . import __version__
from .config import get_config, get_settings
from .core.logging import bind_game_clock, configure_logging, get_logger, shutdown_logging
from .core.exceptions import (
    PersistenceError, get_error_handler, handle_crash, handle_error, setup_exception_handling
)
from .session import GameSession, JsonFilePersistenceGateway, SessionPhase, create_session


def setup_argument_parser() -> argparse.ArgumentParser:
    """
    Set up command line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="vendtycoon",
        description="Vending Tycoon - build and run a vending machine business",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  vendtycoon                          # Start with default configuration
  vendtycoon --debug                  # Start in debug mode
  vendtycoon --config myconfig.json   # Use custom configuration
  vendtycoon --window-size 720x1280   # Portrait window
  vendtycoon --ephemeral              # Keep saves in memory only
  vendtycoon --show-save              # Describe the saved game and exit
        """
    )

    # Basic options
    parser.add_argument(
        "--version",
        action="version",
        version=f"Vending Tycoon {__version__}"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode with verbose logging"
    )

    parser.add_argument(
        "--config",
        type=str,
        metavar="FILE",
        help="Path to configuration file"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set logging level (overrides config)"
    )

    parser.add_argument(
        "--log-file",
        type=str,
        metavar="FILE",
        help="Write log files next to FILE instead of the default location"
    )

    # Window options
    parser.add_argument(
        "--fullscreen",
        action="store_true",
        help="Start in fullscreen mode"
    )

    parser.add_argument(
        "--window-size",
        type=str,
        metavar="WIDTHxHEIGHT",
        help="Set window size (e.g., 480x854)"
    )

    parser.add_argument(
        "--show-performance",
        action="store_true",
        help="Show the performance overlay on startup (toggle with F3)"
    )

    # Save options
    parser.add_argument(
        "--save-file",
        type=str,
        metavar="FILE",
        help="Path of the saved game"
    )

    parser.add_argument(
        "--ephemeral",
        action="store_true",
        help="Keep the saved game in memory only"
    )

    # Utility options
    parser.add_argument(
        "--reset-config",
        action="store_true",
        help="Reset configuration to defaults"
    )

    parser.add_argument(
        "--show-save",
        action="store_true",
        help="Describe the saved game and exit"
    )

    parser.add_argument(
        "--delete-save",
        action="store_true",
        help="Delete the saved game and exit"
    )

    return parser


def parse_window_size(size_str: str) -> Tuple[int, int]:
    """
    Parse window size string into width/height tuple.

    Args:
        size_str: Size string in format "WIDTHxHEIGHT"

    Returns:
        Tuple of (width, height)

    Raises:
        ValueError: If format is invalid
    """
    try:
        width_str, height_str = size_str.lower().split('x')
        width = int(width_str)
        height = int(height_str)

        if width <= 0 or height <= 0:
            raise ValueError("Width and height must be positive")

        return width, height
    except ValueError as e:
        raise ValueError(f"Invalid window size format '{size_str}'. Use WIDTHxHEIGHT (e.g., 480x854)") from e


def apply_command_line_overrides(args: argparse.Namespace) -> None:
    """
    Apply command line argument overrides to configuration.

    Args:
        args: Parsed command line arguments

    Raises:
        ValueError: If the window size is malformed
    """
    config = get_config()

    if args.debug:
        config.set("app.debug", True)
        config.set("app.log_level", "DEBUG")

    if args.log_level:
        config.set("app.log_level", args.log_level)

    if args.fullscreen:
        config.set("app.window.fullscreen", True)

    if args.window_size:
        width, height = parse_window_size(args.window_size)
        config.set("app.window.width", width)
        config.set("app.window.height", height)

    if args.show_performance:
        config.set("ui.show_performance_overlay", True)

    if args.save_file:
        config.set("save.file", args.save_file)

    if args.ephemeral:
        config.set("save.ephemeral", True)


def show_saved_game() -> int:
    """Print a summary of the saved game."""
    gateway = JsonFilePersistenceGateway(get_settings().save_file)
    try:
        metadata = gateway.read_metadata()
        snapshot = gateway.load_sync()
    except PersistenceError as e:
        print(f"Saved game at {gateway.path} is unreadable: {e.message}")
        return 1

    if metadata is None or snapshot is None:
        print(f"No saved game at {gateway.path}")
        return 0

    print(f"Saved game: {gateway.path}")
    print(f"  Saved at:   {metadata.get('saved_at', 'unknown')}")
    print(f"  Cash:       ${snapshot.cash}")
    print(f"  Reputation: {snapshot.reputation}")
    print(f"  Time:       Day {snapshot.day_count}, {snapshot.hour_of_day:02d}:00")
    print(f"  Machines:   {len(snapshot.machines)} ({snapshot.alerts} alerts)")
    return 0


def delete_saved_game() -> int:
    gateway = JsonFilePersistenceGateway(get_settings().save_file)
    if gateway.delete_saved_game_sync():
        print(f"Deleted saved game at {gateway.path}")
    else:
        print(f"No saved game at {gateway.path}")
    return 0


def register_emergency_save(session: GameSession) -> None:
    """Write the live game synchronously if the application crashes."""
    logger = get_logger("main")

    def emergency_save(error: Exception, emergency: bool) -> None:
        # Only a game in progress is worth saving
        if not emergency or session.phase not in (SessionPhase.RUNNING, SessionPhase.PAUSED):
            return
        save_sync = getattr(session.gateway, "save_sync", None)
        if save_sync is None:
            return
        saved = save_sync(session.snapshot())
        logger.warning("Emergency save attempted", extra={"saved": saved})

    get_error_handler().register_crash_handler(emergency_save)


def initialize_application(args: argparse.Namespace) -> bool:
    """
    Initialize the Vending Tycoon application.

    Args:
        args: Parsed command line arguments

    Returns:
        True if initialization successful, False otherwise
    """
    try:
        if args.config:
            config_path = Path(args.config)
            if not config_path.exists():
                print(f"Error: Configuration file '{args.config}' not found")
                return False

            from .config import Config, set_config
            set_config(Config(config_path))

        apply_command_line_overrides(args)

        settings = get_settings()
        log_kwargs = {}
        if args.log_file:
            log_kwargs['log_dir'] = Path(args.log_file).parent
            log_kwargs['file_output'] = True

        configure_logging(
            log_level=settings.log_level,
            **log_kwargs
        )

        setup_exception_handling()

        logger = get_logger("main")
        logger.info("Vending Tycoon starting", extra={
            "version": settings.app_version,
            "debug_mode": settings.debug_mode,
            "target_fps": settings.target_fps,
            "window_size": settings.window_size,
            "save_file": None if settings.ephemeral_saves else str(settings.save_file),
        })

        return True

    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return False
    except Exception as e:
        print(f"Failed to initialize application: {e}")
        handle_error(e)
        return False


def run_application(args: argparse.Namespace, session: Optional[GameSession] = None) -> int:
    """
    Run the main application.

    Args:
        args: Parsed command line arguments
        session: Session to run, built from settings if not provided

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    logger = get_logger("main")

    try:
        # pygame is only needed from here on
        from .ui import VendingTycoonApp

        session = session or create_session()
        register_emergency_save(session)
        bind_game_clock(session.game_clock)

        app = VendingTycoonApp(session)
        exit_code = app.run()

        logger.info("Application shutdown complete", extra={"exit_code": exit_code})
        return exit_code

    except Exception as e:
        logger.critical("Critical error in main application", extra={
            "error": str(e),
            "error_type": type(e).__name__
        })
        handle_crash(e)
        return 1


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for Vending Tycoon.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = setup_argument_parser()
    args = parser.parse_args(argv)

    try:
        # Handle utility commands first (no full initialization needed)
        if args.reset_config:
            print("Resetting configuration to defaults...")
            config = get_config()
            config.reset_to_defaults()
            config.save()
            print("Configuration reset complete.")
            return 0

        if args.show_save or args.delete_save:
            if args.save_file:
                get_config().set("save.file", args.save_file)
            if args.show_save:
                return show_saved_game()
            return delete_saved_game()

        if not initialize_application(args):
            return 1

        return run_application(args)

    except KeyboardInterrupt:
        print("\nApplication interrupted by user")
        return 0
    except Exception as e:
        print(f"Unexpected error: {e}")
        return 1
    finally:
        shutdown_logging()


if __name__ == "__main__":
    sys.exit(main())
