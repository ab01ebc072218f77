"""Core module exports."""

from barrelwatch.core.errors import (
    BarrelWatchError,
    ConfigError,
    ErrorCode,
    GenerationError,
    InternalError,
)
from barrelwatch.core.logging import configure_logging, get_logger
from barrelwatch.core.progress import spinner, status

__all__ = [
    # Errors
    "BarrelWatchError",
    "ConfigError",
    "ErrorCode",
    "GenerationError",
    "InternalError",
    # Logging
    "configure_logging",
    "get_logger",
    # Progress
    "spinner",
    "status",
]
