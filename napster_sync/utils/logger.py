"""Logger utility for structured logging."""

import logging
import sys
from pathlib import Path


DEFAULT_LOGGER_NAME = "napster_sync"

# HTTP client loggers that are too chatty during a run.
QUIET_LOGGERS = ("spotipy", "urllib3", "requests")


def quiet_third_party_loggers(level: int = logging.WARNING) -> None:
    """Raise the level of HTTP client loggers so they don't drown the run output."""
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(level)


def setup_logger(name: str = DEFAULT_LOGGER_NAME, log_file: str = None, level: int = logging.INFO) -> logging.Logger:
    """
    Set up a logger with console and optional file output.

    Modules grab their logger through get_logger() at import time, so this
    reconfigures the existing console handler instead of adding a second one.

    Args:
        name: Logger name
        log_file: Optional path to log file. If None, logs to console only.
        level: Console log level (the file handler always logs DEBUG)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG if log_file else level)

    console_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handlers = [
        h for h in logger.handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    ]
    if not console_handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        logger.addHandler(console_handler)
        console_handlers = [console_handler]

    for handler in console_handlers:
        handler.setLevel(level)
        handler.setFormatter(console_formatter)

    has_file = any(isinstance(h, logging.FileHandler) for h in logger.handlers)
    if log_file and not has_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    quiet_third_party_loggers()
    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """
    Get or create a logger instance with console output.

    Args:
        name: Logger name

    Returns:
        Logger instance with console handler
    """
    logger = logging.getLogger(name)

    # If logger doesn't have handlers yet, set up console output
    if not logger.handlers:
        logger.setLevel(logging.INFO)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_formatter = logging.Formatter(
            '%(message)s'  # Simple format for console
        )
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

    return logger
