"""
Central logging configuration for bndy_calendar.

Installs a colorized console handler and suppresses verbose debug logs from
third-party libraries while keeping bndy_calendar's own diagnostics.
"""

import logging
import os
import sys
from typing import Optional

from colorlog import ColoredFormatter

LOG_FORMAT = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}

# Third-party libraries that generate excessive debug logs
NOISY_LOGGERS: dict[str, int] = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "asyncio": logging.WARNING,
    "icalendar": logging.INFO,
}

PACKAGE_LOGGER = "bndy_calendar"


def _build_console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(LOG_FORMAT, datefmt="%H:%M:%S", log_colors=LOG_COLORS))
    return handler


def configure_logging(debug_mode: bool = False, force_debug: Optional[bool] = None) -> None:
    """
    Configure logging levels for bndy_calendar.

    Args:
        debug_mode: Whether to enable debug logging for bndy_calendar modules
        force_debug: Override debug mode setting (None to use env var detection)

    Environment Variables:
        BNDY_CALENDAR_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        BNDY_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("BNDY_CALENDAR_DEBUG", "").lower() in ("1", "true", "yes")
    env_log_level = os.getenv("BNDY_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    root_level = logging.DEBUG if final_debug else logging.INFO
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    # Only add a handler if none exist, so embedding applications keep theirs
    if not root_logger.handlers:
        root_logger.addHandler(_build_console_handler(root_level))

    for logger_name, level in NOISY_LOGGERS.items():
        logging.getLogger(logger_name).setLevel(level)
    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if final_debug else logging.INFO)

    if final_debug:
        root_logger.debug("Debug logging enabled for bndy_calendar modules")


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}
    for logger_name in [PACKAGE_LOGGER, *NOISY_LOGGERS]:
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)
    return status
