"""
Logging Configuration Module.

Sets up logging for applications embedding the map widgets. The widgets
themselves only create module loggers; the host application calls
setup_logging() once, before the first map is constructed, so the engine
bootstrap is captured in the log.

The log directory and level can be overridden with PETMAP_LOG_DIR and
PETMAP_LOG_LEVEL, read after the entry point has loaded .env.
"""

import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Mapping, Optional

import PySide6
from PySide6.QtCore import qVersion

LOG_DIR = "logs"
LOG_FILENAME = "petmap.log"
MAX_BYTES = 5 * 1024 * 1024  # 5 MB
BACKUP_COUNT = 5
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_DIR_ENV = "PETMAP_LOG_DIR"
LOG_LEVEL_ENV = "PETMAP_LOG_LEVEL"


class SafeRotatingFileHandler(RotatingFileHandler):
    """
    Rotating handler that tolerates a locked log file on Windows.

    Two demo windows sharing one log directory would otherwise crash the
    second one at rollover time.
    """

    def doRollover(self) -> None:
        """Rotates the file, keeping the current one if Windows holds a lock."""
        try:
            super().doRollover()
        except PermissionError:
            if sys.platform != "win32":
                raise


def resolve_log_level(
    debug_mode: bool = False, environ: Optional[Mapping[str, str]] = None
) -> int:
    """
    Picks the log level for the session.

    Args:
        debug_mode: Forces DEBUG, e.g. from a --debug flag.
        environ: Mapping to read PETMAP_LOG_LEVEL from. Defaults to os.environ.

    Returns:
        int: A logging level. Unknown level names fall back to INFO.
    """
    if debug_mode:
        return logging.DEBUG

    env = os.environ if environ is None else environ
    name = env.get(LOG_LEVEL_ENV, "").strip().upper()
    level = logging.getLevelName(name) if name else logging.INFO
    return level if isinstance(level, int) else logging.INFO


def _log_file_path(log_dir: str) -> str:
    """Returns the log file path, falling back to the working directory."""
    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError as e:
        print(f"Failed to create log directory {log_dir}: {e}. Logging to cwd.")
        return LOG_FILENAME
    return os.path.join(log_dir, LOG_FILENAME)


def _engine_versions() -> str:
    """Describes the Qt stack the maps run on, for the session banner."""
    return f"PySide6 {PySide6.__version__}, Qt {qVersion()}"


def setup_logging(
    debug_mode: bool = False,
    log_to_console: bool = True,
    log_dir: Optional[str] = None,
) -> Optional[str]:
    """
    Configures the root logger for a map session.

    Replaces any handlers already on the root logger, so calling it twice
    does not duplicate output.

    Args:
        debug_mode: If True, logs at DEBUG regardless of PETMAP_LOG_LEVEL.
        log_to_console: If True, also logs to stderr.
        log_dir: Directory for petmap.log. Defaults to PETMAP_LOG_DIR, then "logs".

    Returns:
        Optional[str]: Path of the log file, or None if it could not be opened.
    """
    level = resolve_log_level(debug_mode)
    log_path: Optional[str] = _log_file_path(
        log_dir or os.environ.get(LOG_DIR_ENV) or LOG_DIR
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    try:
        file_handler = SafeRotatingFileHandler(
            log_path,
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as e:
        print(f"CRITICAL: Could not set up file logging: {e}")
        log_path = None
    else:
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)

    logging.info("=" * 60)
    logging.info(f"PetMap Session Started at {datetime.now().isoformat()}")
    logging.info(f"Map engine stack: {_engine_versions()}")
    logging.info(f"Log level: {logging.getLevelName(level)}, file: {log_path}")
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
    """Closes all handlers so the log file is released on exit."""
    logging.shutdown()
