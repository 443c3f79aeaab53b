"""Logging utilities for image-resize.

Provides a small, centralized logging setup that supports:
- An explicit LogConfig object with ordered levels
- Separate handling for errors/warnings vs info/debug
- Clean output format suitable for CLI usage
"""

import logging
import sys
from dataclasses import dataclass
from enum import IntEnum

LOGGER_NAME = "image_resize"

# Module-level logger
_logger: logging.Logger | None = None


class LogLevel(IntEnum):
    """Ordered log levels, mapped onto the standard library values."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR

    @classmethod
    def parse(cls, name: str) -> "LogLevel":
        """Parse a level name such as "debug" or "WARNING".

        Raises:
            ValueError: If the name is not a known level
        """
        try:
            return cls[str(name).strip().upper()]
        except KeyError:
            valid = ", ".join(level.name.lower() for level in cls)
            raise ValueError(f"Unknown log level '{name}' (expected one of: {valid})")


@dataclass
class LogConfig:
    """Logger configuration passed to setup_logging()."""

    level: LogLevel = LogLevel.INFO


class CleanFormatter(logging.Formatter):
    """Formatter that outputs clean messages without log level prefixes."""

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


class PrefixFormatter(logging.Formatter):
    """Formatter that prefixes messages with level name for warnings/errors."""

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            return f"{record.levelname.capitalize()}: {record.getMessage()}"
        return record.getMessage()


def setup_logging(config: LogConfig | None = None) -> logging.Logger:
    """Configure the image_resize logger.

    Args:
        config: Logger configuration. Defaults to INFO level.

    Returns:
        The configured logger instance.
    """
    global _logger

    config = config or LogConfig()
    logger = logging.getLogger(LOGGER_NAME)

    # Clear any existing handlers
    logger.handlers.clear()
    logger.setLevel(int(config.level))

    # Create handlers for stdout (info/debug) and stderr (warnings/errors)
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(logging.DEBUG)
    stdout_handler.addFilter(lambda r: r.levelno < logging.WARNING)
    stdout_handler.setFormatter(CleanFormatter())

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(PrefixFormatter())

    logger.addHandler(stdout_handler)
    logger.addHandler(stderr_handler)

    # Prevent propagation to root logger
    logger.propagate = False

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """Get the image_resize logger, initializing with defaults if needed."""
    global _logger
    if _logger is None:
        _logger = setup_logging()
    return _logger


# Convenience functions that delegate to the logger


def debug(msg: str) -> None:
    """Log a debug message (only shown with --verbose)."""
    get_logger().debug(msg)


def info(msg: str) -> None:
    """Log an info message."""
    get_logger().info(msg)


def warning(msg: str) -> None:
    """Log a warning message to stderr."""
    get_logger().warning(msg)


def error(msg: str) -> None:
    """Log an error message to stderr."""
    get_logger().error(msg)
