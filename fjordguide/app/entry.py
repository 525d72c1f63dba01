"""
Application Entry Point.

This module contains the main() function and cleanup logic for the application.
Kept apart from MainWindow so the window can be built in tests without
parsing arguments or starting an event loop.
"""

import argparse
import sys
from datetime import datetime
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Imports after load_dotenv() so constants see the environment overrides
from PySide6.QtCore import Qt  # noqa: E402
from PySide6.QtWidgets import QApplication  # noqa: E402

from fjordguide import __version__  # noqa: E402
from fjordguide.app.constants import (  # noqa: E402
    WINDOW_SETTINGS_APP,
    WINDOW_SETTINGS_KEY,
)
from fjordguide.core.logging_config import (  # noqa: E402
    get_logger,
    setup_logging,
    shutdown_logging,
)
from fjordguide.services.location_service import (  # noqa: E402
    LocationService,
    parse_location_arg,
)

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Returns the command line parser for the desktop application."""
    parser = argparse.ArgumentParser(
        prog="fjordguide",
        description="Offline-friendly travel map for the Flåm and Aurland area.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--reset-settings",
        action="store_true",
        help="Clear stored window state and markers before starting",
    )
    parser.add_argument(
        "--location",
        type=parse_location_arg,
        metavar="LAT,LON",
        help="Pin the user location instead of using the positioning service",
    )
    return parser


def reset_settings() -> None:
    """Clears every value stored under the application's settings scope."""
    from PySide6.QtCore import QSettings

    settings = QSettings(WINDOW_SETTINGS_KEY, WINDOW_SETTINGS_APP)
    settings.clear()
    settings.sync()
    logger.info("Settings cleared")


def main(argv: Optional[List[str]] = None) -> None:
    """Application entry point."""
    args, qt_args = build_parser().parse_known_args(argv)

    setup_logging(debug_mode=args.debug)

    # Defer the window import until logging is configured
    from fjordguide.app.main_window import MainWindow

    logger.info("=" * 60)
    started = datetime.now().isoformat()
    logger.info(f"FjordGuide {__version__} session started at {started}")
    logger.info("=" * 60)

    try:
        QApplication.setHighDpiScaleFactorRoundingPolicy(
            Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
        )

        app = QApplication([sys.argv[0]] + qt_args)
        app.setOrganizationName(WINDOW_SETTINGS_KEY)
        app.setApplicationName(WINDOW_SETTINGS_APP)

        if args.reset_settings:
            print("Resetting application settings...")
            reset_settings()
            print("Settings cleared. Starting in default state.")

        location_service = LocationService(fixed_location=args.location)

        window = MainWindow(location_service=location_service)
        window.show()

        logger.info("Entering event loop...")
        exit_code = app.exec()
        cleanup_app()
        sys.exit(exit_code)
    except Exception:
        logger.exception("CRITICAL: Unhandled exception in main application loop")
        sys.exit(1)


def cleanup_app() -> None:
    """Performs global cleanup operations before exit."""
    logger.info("Shutting down logging.")
    shutdown_logging()


if __name__ == "__main__":
    main()
