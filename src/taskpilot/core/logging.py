"""
Logging configuration.

Console plus optional file output under the "taskpilot" logger.
"""

import logging
import sys
from pathlib import Path


def setup_logging(
    level: int = logging.INFO,
    log_file: Path | None = None,
    console: bool = True,
) -> logging.Logger:
    """Configure package logger with console and optional file output."""
    logger = logging.getLogger("taskpilot")
    logger.setLevel(level)

    # Repeated setup (tests, embedded use) must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Console goes to stderr so CLI output stays clean
    if console:
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(formatter)
        logger.addHandler(stream)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child logger."""
    return logging.getLogger(f"taskpilot.{name}")


def preview(text: str, limit: int = 100) -> str:
    """Shorten text for debug logs."""
    return text[:limit] + "..." if len(text) > limit else text
