import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

from pkgmgr.constants import (
    DEBUG_LOG_FORMAT,
    DEFAULT_CONSOLE_LOG_LEVEL,
    DISABLE_FILE_LOGGING_ENV_VAR,
    INFO_LOG_FORMAT,
    LOG_DATE_FORMAT,
    LOG_FILE_BACKUP_COUNT,
    LOG_FILE_MAX_BYTES,
    LOG_LEVEL_ENV_VAR,
    LOGGER_NAME,
)

logger = logging.getLogger(LOGGER_NAME)

# Kept so the file handler can be replaced when the log destination changes
_file_handler: Optional[RotatingFileHandler] = None


def _file_formatter(level: int) -> logging.Formatter:
    if level >= logging.INFO:
        return logging.Formatter(INFO_LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    return logging.Formatter(DEBUG_LOG_FORMAT, datefmt=LOG_DATE_FORMAT)


def set_log_level(level_name: str) -> None:
    """
    Set the log level for the pkgmgr logger and reconfigure all attached handlers.

    If `level_name` is not a valid logging level name (e.g., "DEBUG", "INFO"), the function logs a warning and leaves the current configuration unchanged.

    The console RichHandler always uses a message-only formatter; the file handler
    switches between the informational and the debug format depending on the level.

    Parameters:
        level_name (str): Case-insensitive name of the desired logging level (e.g., "debug", "INFO").
    """
    level = getattr(logging, level_name.upper(), None)
    if not isinstance(level, int):
        logger.warning(f"Invalid log level name: {level_name}. Using current level.")
        return

    logger.setLevel(level)

    for handler in logger.handlers:
        handler.setLevel(level)
        if isinstance(handler, RichHandler):
            handler.setFormatter(logging.Formatter("%(message)s"))
        else:
            handler.setFormatter(_file_formatter(level))

    logger.debug(f"Log level set to {logging.getLevelName(level)}")


def file_logging_disabled() -> bool:
    """Return True when file logging is switched off through the environment."""
    value = os.environ.get(DISABLE_FILE_LOGGING_ENV_VAR, "")
    return value.strip().lower() in {"1", "true", "yes", "on"}


def add_file_logging(log_file: Union[str, Path], level_name: str = "INFO") -> bool:
    """
    Enable append-only rotating file logging for the pkgmgr logger.

    Creates the parent directory if necessary and attaches a RotatingFileHandler
    writing to `log_file`. Existing file logging configured by this module is
    removed and closed before reconfiguring. The logger's own level is lowered
    when needed so records reach the file even if the console shows less.

    Parameters:
        log_file: Destination of the log (the `logFile` setting).
        level_name: Level for the file handler; invalid names fall back to INFO.

    Returns:
        bool: `True` if the handler was attached, `False` if file logging is
        disabled or the log file could not be opened.
    """
    global _file_handler
    if _file_handler is not None:
        if _file_handler in logger.handlers:
            logger.removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None

    if file_logging_disabled():
        return False

    resolved = getattr(logging, level_name.upper(), None)
    if not isinstance(resolved, int):
        logger.warning(
            f"Invalid file log level name: {level_name}. Defaulting to INFO."
        )
        resolved = logging.INFO

    log_path = Path(log_file)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_path,
            mode="a",
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as e:
        logger.warning(f"Could not open log file {log_path}: {e}")
        return False

    handler.setFormatter(_file_formatter(resolved))
    handler.setLevel(resolved)
    _file_handler = handler
    logger.addHandler(handler)
    if logger.level > resolved:
        logger.setLevel(resolved)

    logger.debug(
        f"File logging enabled at {log_path} with level {logging.getLevelName(resolved)}"
    )
    return True


def _initialize_logger() -> None:
    """
    Initialize the pkgmgr logger with a stderr RichHandler.

    Removes any existing handlers, disables propagation to the root logger, and
    attaches a RichHandler for diagnostics. User-facing output is printed by the
    CLI, so the console handler defaults to WARNING; the level can be overridden
    with the environment variable named by LOG_LEVEL_ENV_VAR. File logging is
    enabled later through add_file_logging() once settings are loaded.
    """
    logger.propagate = False

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_time=True,
        show_level=True,
        show_path=False,
        markup=False,
        log_time_format=LOG_DATE_FORMAT,
    )

    level_name = os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_CONSOLE_LOG_LEVEL).upper()
    resolved = getattr(logging, level_name, None)
    if not isinstance(resolved, int):
        logger.warning(
            f"Invalid {LOG_LEVEL_ENV_VAR}={level_name}; defaulting to {DEFAULT_CONSOLE_LOG_LEVEL}."
        )
        resolved = getattr(logging, DEFAULT_CONSOLE_LOG_LEVEL)

    console_handler.setFormatter(logging.Formatter("%(message)s"))
    console_handler.setLevel(resolved)
    logger.addHandler(console_handler)
    logger.setLevel(resolved)


# Initialize the logger when the module is imported
_initialize_logger()
