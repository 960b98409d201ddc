"""Logging setup for the webclipper CLI and for applications embedding it."""

import logging
import sys
from typing import Optional, Union

LOGGER_NAME = "webclipper"

CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# HTTP libraries whose debug chatter would bury ours under -v
_NOISY_LOGGERS = ("urllib3", "charset_normalizer")


def level_for(verbose: bool = False, quiet: bool = False) -> int:
    """Map the CLI's --verbose/--quiet flags to a logging level."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    return logging.WARNING


def setup_logging(
    level: Union[int, str] = logging.WARNING,
    log_file: Optional[str] = None,
    force: bool = False,
) -> logging.Logger:
    """
    Configure the ``webclipper`` logger.

    Console records go to stderr, so Markdown or JSON written to stdout
    can be piped. The log file, when given, gets timestamped records.

    Args:
        level: Level name ("DEBUG", "INFO", ...) or number
        log_file: Optional file path for a second, timestamped handler
        force: Replace existing handlers instead of keeping them

    Returns:
        The ``webclipper`` logger
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if force or not logger.handlers:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
            logger.addHandler(file_handler)

    if level <= logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    # Records stop here; the root logger belongs to the host application
    logger.propagate = False
    return logger
