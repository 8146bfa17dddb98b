"""
Structured logging configuration for the cao-model project.

Library modules only call ``logging.getLogger``; entry points call
``setup_logging`` once to attach handlers, with separate files for the
different concerns.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import List, Optional

# Define logger names for different concerns
RESOLUTION_LOGGER = "cao_model.resolution"
DATA_QUALITY_LOGGER = "cao_model.data_quality"
DEBUG_LOGGER = "cao_model.debug"

# Standard log format with module name and line number
LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILES: List[str] = [
    "combined.log",
    "warnings_errors.log",
    "resolution_events.log",
    "data_quality.log",
    "debug_detail.log",
]

MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5

# Track if logging is already configured
_LOGGING_CONFIGURED = False
_attached: List[logging.Handler] = []


def clear_logs(log_dir: Path) -> None:
    """
    Delete the log files this module writes in ``log_dir``.

    Args:
        log_dir: Directory containing log files to clear
    """
    for name in LOG_FILES:
        log_file = log_dir / name
        if log_file.exists():
            try:
                log_file.unlink()
            except OSError as e:
                logging.getLogger(__name__).warning("Could not delete %s: %s", log_file, e)


def _file_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
        mode="a",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _attach(logger: logging.Logger, handler: logging.Handler) -> None:
    logger.addHandler(handler)
    _attached.append(handler)


def _route(name: str, handler: logging.Handler, level: int) -> None:
    """Send one named logger to its own file while still bubbling up to root."""
    named = logging.getLogger(name)
    for h in named.handlers[:]:
        named.removeHandler(h)
    named.setLevel(level)
    _attach(named, handler)
    named.propagate = True


def setup_logging(log_dir: Path, debug: bool = False, clear_existing: bool = True) -> None:
    """
    Configure structured logging for the application.

    Creates separate log files for different concerns:
    - combined.log: All messages (INFO+, DEBUG+ when debug=True)
    - warnings_errors.log: Warnings and errors (WARNING+)
    - resolution_events.log: Forward/reverse wage lookups (INFO+)
    - data_quality.log: Data-quality warnings from normalization and timelines
    - debug_detail.log: Candidate-level detail (DEBUG, only if debug=True)

    Args:
        log_dir: Directory where log files will be stored
        debug: If True, enables debug logging and creates debug_detail.log
        clear_existing: If True, clears existing log files before starting
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        return

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    if clear_existing:
        clear_logs(log_dir)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_level = logging.DEBUG if debug else logging.INFO
    root_logger.setLevel(root_level)

    file_formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    console_formatter = logging.Formatter("%(levelname)-8s %(message)s")

    # Console handler (for warnings and above)
    console = logging.StreamHandler()
    console.setLevel(logging.WARNING)
    console.setFormatter(console_formatter)
    _attach(root_logger, console)

    _attach(root_logger, _file_handler(log_dir / "combined.log", root_level, file_formatter))
    _attach(
        root_logger,
        _file_handler(log_dir / "warnings_errors.log", logging.WARNING, file_formatter),
    )

    _route(
        RESOLUTION_LOGGER,
        _file_handler(log_dir / "resolution_events.log", logging.INFO, file_formatter),
        logging.DEBUG if debug else logging.INFO,
    )
    _route(
        DATA_QUALITY_LOGGER,
        _file_handler(log_dir / "data_quality.log", logging.INFO, file_formatter),
        logging.INFO,
    )

    if debug:
        _route(
            DEBUG_LOGGER,
            _file_handler(log_dir / "debug_detail.log", logging.DEBUG, file_formatter),
            logging.DEBUG,
        )

    _LOGGING_CONFIGURED = True


def shutdown_logging() -> None:
    """Detach and close the handlers added by ``setup_logging``."""
    global _LOGGING_CONFIGURED

    for handler in _attached:
        for name in (None, RESOLUTION_LOGGER, DATA_QUALITY_LOGGER, DEBUG_LOGGER):
            logging.getLogger(name).removeHandler(handler)
        handler.close()
    _attached.clear()
    _LOGGING_CONFIGURED = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a properly configured logger instance.

    Args:
        name: Logger name (e.g., __name__). If None, returns root logger.

    Returns:
        Configured logger instance
    """
    if not _LOGGING_CONFIGURED:
        setup_logging(Path("output_dev/cao_logs"), debug=False, clear_existing=False)
    return logging.getLogger(name)
