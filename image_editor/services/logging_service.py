"""
Logging service for the image editor.

This module provides centralized logging configuration with console and file output.
Log files are stored in ~/.local/share/image_editor/logs/ by default.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional


# Default log directory following XDG Base Directory Specification
DEFAULT_LOG_DIR = Path.home() / ".local" / "share" / "image_editor" / "logs"

# Module-level flag to track if logging has been set up
_logging_initialized = False


def setup_logging(
    log_level: int = logging.INFO,
    log_to_file: bool = True,
    log_dir: Optional[Path] = None,
) -> None:
    """
    Configure the logging system for the editor.

    Args:
        log_level: The logging level (e.g., logging.DEBUG, logging.INFO).
        log_to_file: Whether to also log to a file.
        log_dir: Directory for log files. Defaults to ~/.local/share/image_editor/logs/

    Only the first call has an effect.
    """
    global _logging_initialized

    if _logging_initialized:
        return

    if log_dir is None:
        log_dir = DEFAULT_LOG_DIR

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    # Console handler - always enabled
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(log_format, date_format))
    root_logger.addHandler(console_handler)

    if log_to_file:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)

            log_filename = f"image_editor_{datetime.now().strftime('%Y%m%d')}.log"
            log_path = log_dir / log_filename

            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setLevel(log_level)
            file_handler.setFormatter(logging.Formatter(log_format, date_format))
            root_logger.addHandler(file_handler)

        except (OSError, PermissionError) as e:
            # If we can't create the log file, just log to console
            console_handler.setLevel(logging.WARNING)
            root_logger.warning(f"Could not create log file: {e}. Logging to console only.")

    _logging_initialized = True


def reset_logging() -> None:
    """Allow setup_logging() to run again (used by tests)."""
    global _logging_initialized
    _logging_initialized = False


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: The name for the logger, typically __name__ of the calling module.

    Returns:
        A configured Logger instance.

    Usage:
        from image_editor.services.logging_service import get_logger
        logger = get_logger(__name__)
        logger.info("Image loaded")
    """
    return logging.getLogger(name)
