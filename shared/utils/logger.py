"""
Structured logging configuration for the application.

Every module gets its logger from setup_logger(__name__). Per-user work in
the insights service logs through a UserLogAdapter so each line carries the
user it was produced for.
"""

import logging
import sys
from pathlib import Path
from typing import Any, MutableMapping, Tuple, Union

from .config import settings


def _formatter() -> logging.Formatter:
    return logging.Formatter(fmt=settings.LOG_FORMAT, datefmt=settings.LOG_DATE_FORMAT)


def setup_logger(name: str) -> logging.Logger:
    """
    Setup a logger with consistent formatting.

    Console output always; a file handler under LOG_DIR only when
    LOG_TO_FILE is set.

    Args:
        name: Logger name (usually __name__ of the module)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Only configure if not already configured
    if not logger.handlers:
        logger.setLevel(settings.LOG_LEVEL)
        formatter = _formatter()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(settings.LOG_LEVEL)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if settings.LOG_TO_FILE:
            Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(settings.log_file_path)
            file_handler.setLevel(settings.LOG_LEVEL)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


class UserLogAdapter(logging.LoggerAdapter):
    """Prefixes every message with the user it concerns."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[user={self.extra['user_id']}] {msg}", kwargs


def for_user(logger: logging.Logger, user_id: str) -> UserLogAdapter:
    """
    Bind a logger to one user.

    Example:
        >>> for_user(logger, "user-1").info("Report ready")
        2025-01-01 10:00:00 - insights - INFO - [user=user-1] Report ready
    """
    return UserLogAdapter(logger, {"user_id": user_id})


def log_error(
    logger: Union[logging.Logger, logging.LoggerAdapter],
    error: Exception,
    context: str = ""
) -> None:
    """
    Log an error with context.

    Args:
        logger: Logger instance or user-bound adapter
        error: Exception that occurred
        context: Additional context about where the error occurred
    """
    if context:
        logger.error(f"{context}: {type(error).__name__}: {str(error)}")
    else:
        logger.error(f"{type(error).__name__}: {str(error)}")

    if settings.DEBUG:
        logger.exception("Full traceback:")
