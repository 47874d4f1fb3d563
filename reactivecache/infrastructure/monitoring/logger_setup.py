"""Logging configuration for the reactivecache CLI.

Library modules only create module loggers. The CLI calls
setup_logging_from_settings once per process to attach a stderr handler
and, when logging.file is set, a size-rotated file handler to the root
logger. Re-running the setup replaces the handlers it installed earlier and
leaves any other handler alone.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from reactivecache.infrastructure.config.settings import get_config

DEFAULT_LOG_LEVEL = logging.WARNING
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE_MAX_BYTES = 1024 * 1024
LOG_FILE_BACKUP_COUNT = 3
HANDLER_NAME_PREFIX = "reactivecache."


def level_from_name(name: Optional[str], default: int = DEFAULT_LOG_LEVEL) -> int:
    """'debug' -> logging.DEBUG; unknown names give default."""
    if not name:
        return default
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else default


def installed_handlers() -> List[logging.Handler]:
    """Root handlers attached by setup_logging."""
    return [
        handler for handler in logging.getLogger().handlers
        if (handler.get_name() or "").startswith(HANDLER_NAME_PREFIX)
    ]


def _file_handler(log_file: str) -> RotatingFileHandler:
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUP_COUNT, encoding='utf-8'
    )


def setup_logging(
    log_level: int = DEFAULT_LOG_LEVEL,
    log_format: str = DEFAULT_LOG_FORMAT,
    log_file: Optional[str] = None
) -> None:
    """Attaches the reactivecache handlers to the root logger.

    Args:
        log_level: Minimum level for the root logger and both handlers.
        log_format: Format string shared by the handlers.
        log_file: Optional log file, rotated once it reaches LOG_FILE_MAX_BYTES.
    """
    root_logger = logging.getLogger()
    for handler in installed_handlers():
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(log_level)
    formatter = logging.Formatter(log_format)

    # stderr keeps command output on stdout clean
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    handlers[0].set_name(f"{HANDLER_NAME_PREFIX}console")
    if log_file:
        try:
            file_handler = _file_handler(log_file)
        except OSError as e:
            logging.getLogger(__name__).error(f"Cannot log to {log_file}: {e}")
        else:
            file_handler.set_name(f"{HANDLER_NAME_PREFIX}file")
            handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logging.getLogger(__name__).debug(
        f"Logging configured. Level={logging.getLevelName(log_level)}, file={log_file or '-'}"
    )


def setup_logging_from_settings() -> None:
    """Configures logging from the logging.level, logging.format and logging.file settings."""
    setup_logging(
        log_level=level_from_name(get_config('logging.level')),
        log_format=get_config('logging.format', DEFAULT_LOG_FORMAT),
        log_file=get_config('logging.file'),
    )
