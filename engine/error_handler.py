"""
Centralized error handling and logging for the tactics core.

This module provides:
- The shared "chress" logger (console handler, optional daily log file)
- Custom exception types for different error categories
- A single helper for logging errors with context
"""
import logging
import traceback
from pathlib import Path
from typing import Optional
from datetime import datetime

# Configure logger
logger = logging.getLogger("chress")
logger.setLevel(logging.DEBUG)

# Prevent duplicate handlers
if not logger.handlers:
    # Console handler for warnings/errors
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(
        logging.Formatter('%(levelname)s: %(message)s')
    )
    logger.addHandler(console_handler)


def enable_file_logging(log_dir: Path) -> Path:
    """
    Attach a detailed DEBUG file handler writing into log_dir.

    Calling this twice for the same directory does not add a second handler.

    Returns:
        Path of the log file in use
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"tactics_{datetime.now().strftime('%Y%m%d')}.log"

    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename).resolve() == log_file.resolve():
            return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    )
    logger.addHandler(file_handler)
    return log_file


class TacticsError(Exception):
    """Base exception for tactics-core errors."""
    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.user_message = user_message or message


class GridError(TacticsError):
    """Malformed grid data."""
    pass


class ConfigError(TacticsError):
    """Invalid configuration values."""
    pass


class TurnError(TacticsError):
    """Unexpected failure while resolving a turn."""
    pass


def log_error(
    error: Exception,
    context: str = "",
    user_message: Optional[str] = None,
) -> None:
    """
    Log an error with context.

    Args:
        error: The exception that occurred
        context: Additional context about where/why the error occurred
        user_message: Optional friendly message (defaults to the error's own)
    """
    error_type = type(error).__name__
    error_msg = str(error)

    log_msg = f"{error_type} in {context}: {error_msg}" if context else f"{error_type}: {error_msg}"
    logger.error(log_msg)
    logger.debug(traceback.format_exc())

    if user_message is None and isinstance(error, TacticsError):
        user_message = error.user_message
    if user_message:
        logger.info(f"User message: {user_message}")
