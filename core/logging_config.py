"""
Logging Configuration - Centralized logging cho dictionary builds

Mot logger "lexicon-builder" dung chung cho walker, producers, workers va CLI.
Log file duoc luu tai ~/.lexicon-builder/logs/build.log

- Console -> stderr, stdout de danh cho output cua CLI
- File log co rotation (5 files x 2MB) va buffered writes
- Debug mode them thread name vao console (walker/reader/worker)
"""

import logging
import logging.handlers
import sys
from typing import Optional

from config.paths import LOG_DIR, DEBUG_MODE

LOGGER_NAME = "lexicon-builder"
LOG_FILE_NAME = "build.log"

MAX_LOG_SIZE = 2 * 1024 * 1024  # 2MB per file
MAX_LOG_FILES = 5
BUFFER_CAPACITY = 200  # Records giu trong memory truoc khi flush

_CONSOLE_FORMAT = "[%(levelname)s] %(message)s"
_DEBUG_CONSOLE_FORMAT = "[%(levelname)s] %(threadName)s: %(message)s"

_logger: Optional[logging.Logger] = None
_console_handler: Optional[logging.Handler] = None


def _level(debug: bool) -> int:
    return logging.DEBUG if debug else logging.INFO


def _attach_file_handler(logger: logging.Logger) -> None:
    """
    Gan RotatingFileHandler (boc trong MemoryHandler) vao logger.

    Khong tao duoc log dir -> chi log ra console.
    """
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            LOG_DIR / LOG_FILE_NAME,
            maxBytes=MAX_LOG_SIZE,
            backupCount=MAX_LOG_FILES,
            encoding="utf-8",
        )
    except OSError as e:
        logger.warning(f"Could not create log file: {e}")
        return

    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(threadName)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    file_handler.setLevel(logging.DEBUG)

    # Worker errors phai xuong disk ngay, khong doi buffer day
    memory_handler = logging.handlers.MemoryHandler(
        capacity=BUFFER_CAPACITY,
        flushLevel=logging.ERROR,
        target=file_handler,
    )
    memory_handler.setLevel(_level(DEBUG_MODE))
    logger.addHandler(memory_handler)


def get_logger() -> logging.Logger:
    """
    Get hoac tao logger singleton.

    Returns:
        Configured logger instance
    """
    global _logger, _console_handler

    if _logger is not None:
        return _logger

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_level(DEBUG_MODE))
    logger.propagate = False

    if not logger.handlers:
        _console_handler = logging.StreamHandler(sys.stderr)
        _console_handler.setLevel(_level(DEBUG_MODE))
        _console_handler.setFormatter(
            logging.Formatter(_DEBUG_CONSOLE_FORMAT if DEBUG_MODE else _CONSOLE_FORMAT)
        )
        logger.addHandler(_console_handler)
        _attach_file_handler(logger)

    _logger = logger
    return _logger


def flush_logs():
    """
    Flush buffered logs to disk.
    CLI goi truoc khi return exit code.
    """
    if _logger:
        for handler in _logger.handlers:
            try:
                handler.flush()
            except (OSError, ValueError):
                pass  # Handler da bi close khi interpreter shutdown


def set_debug_mode(enabled: bool):
    """
    Bat/tat DEBUG level luc runtime (CLI --debug).

    Args:
        enabled: True de log ca per-file read failures va queue events
    """
    global DEBUG_MODE
    DEBUG_MODE = enabled

    logger = get_logger()
    logger.setLevel(_level(enabled))
    for handler in logger.handlers:
        handler.setLevel(_level(enabled))
    if _console_handler is not None:
        _console_handler.setFormatter(
            logging.Formatter(_DEBUG_CONSOLE_FORMAT if enabled else _CONSOLE_FORMAT)
        )


def log_error(message: str, exc: Optional[BaseException] = None):
    """Log error, kem traceback khi debug"""
    logger = get_logger()
    if exc:
        logger.error(f"{message}: {exc}", exc_info=exc if DEBUG_MODE else None)
    else:
        logger.error(message)


def log_warning(message: str):
    get_logger().warning(message)


def log_info(message: str):
    get_logger().info(message)


def log_debug(message: str):
    """Chi ghi khi DEBUG_MODE bat"""
    if DEBUG_MODE:
        get_logger().debug(message)
