"""
Logging setup for the Spotter CLI.

Everything goes to one rotating file, ``<log_dir>/spotter.log``, where
``log_dir`` is ``Config.log_dir`` (``<state>/logs`` unless LOG_DIR is set).
Module loggers under ``spotter.*`` propagate into the package logger
configured here.
"""
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Union

LOGGER_NAME = "spotter"
LOG_FILE = "spotter.log"

MAX_BYTES = 2 * 1024 * 1024
BACKUP_COUNT = 3

FILE_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _resolve_level(log_level: str) -> int:
    level = logging.getLevelName(str(log_level).strip().upper())
    # getLevelName returns "Level X" for names it does not know
    return level if isinstance(level, int) else logging.INFO


def setup_logging(
    log_dir: Union[str, Path],
    log_level: str = "INFO",
    verbose: bool = False,
) -> logging.Logger:
    """
    Attach Spotter's handlers to the ``spotter`` package logger.

    Calling it again replaces (and closes) the handlers from the previous
    call, so repeated CLI invocations in one process never share a file.

    Args:
        log_dir: Directory for ``spotter.log``; created if missing
        log_level: Level name for the package logger (unknown names mean INFO)
        verbose: Also echo records to stderr; stdout stays reserved for
            command output

    Returns:
        The configured package logger
    """
    log_dir = Path(log_dir).expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_resolve_level(log_level))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / LOG_FILE,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(file_handler)

    if verbose:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    logger.propagate = False
    logger.debug(f"Logging to {log_dir / LOG_FILE}")
    return logger
