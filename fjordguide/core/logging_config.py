"""
Logging Configuration Module.

Centralized logging setup for the application: a size-rotated log file in
the user data directory plus optional console output.
"""

import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Optional

from fjordguide.core.paths import get_user_data_path

LOG_DIRNAME = "logs"
LOG_FILENAME = "fjordguide.log"
MAX_BYTES = 5 * 1024 * 1024  # 5 MB
BACKUP_COUNT = 5
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty third-party loggers kept at WARNING unless debugging them directly
QUIET_LOGGERS = ("urllib3", "requests")


class SafeRotatingFileHandler(RotatingFileHandler):
    """
    A RotatingFileHandler that survives Windows file locking on rollover.

    When another process holds the log file open, rotation raises
    PermissionError on Windows; the handler keeps writing to the current
    file instead.
    """

    def doRollover(self) -> None:
        """Performs log file rotation, skipping it if the file is locked."""
        try:
            super().doRollover()
        except PermissionError:
            if sys.platform != "win32":
                raise


def setup_logging(
    debug_mode: bool = False,
    log_to_console: bool = True,
    log_dir: Optional[str] = None,
) -> str:
    """
    Configures the root logger.

    Should be called once at application startup. Calling it again replaces
    the previously installed handlers.

    Args:
        debug_mode: If True, sets level to DEBUG. Defaults to INFO.
        log_to_console: If True, adds a StreamHandler.
        log_dir: Directory for the log file. Defaults to the user data dir.

    Returns:
        str: Path of the log file in use.
    """
    if log_dir is None:
        log_dir = get_user_data_path(LOG_DIRNAME)

    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError as e:
        print(f"Failed to create log directory: {e}. Logging to current directory.")
        log_path = LOG_FILENAME
    else:
        log_path = os.path.join(log_dir, LOG_FILENAME)

    root_logger = logging.getLogger()
    if root_logger.handlers:
        for handler in list(root_logger.handlers):
            handler.close()
        root_logger.handlers.clear()

    level = logging.DEBUG if debug_mode else logging.INFO
    root_logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    try:
        file_handler = SafeRotatingFileHandler(
            log_path,
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
            delay=False,
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)
    except OSError as e:
        print(f"CRITICAL: Could not set up file logging: {e}")

    if log_to_console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info("=" * 60)
    logging.info(f"FjordGuide Session Started at {datetime.now().isoformat()}")
    logging.info("=" * 60)
    return log_path


def get_logger(name: str) -> logging.Logger:
    """
    Convenience function to get a logger with the given name.

    Args:
        name: The name of the logger (usually __name__).

    Returns:
        logging.Logger: The logger instance.
    """
    return logging.getLogger(name)


def shutdown_logging() -> None:
    """Flushes and closes all logging handlers to release file locks."""
    logging.shutdown()
