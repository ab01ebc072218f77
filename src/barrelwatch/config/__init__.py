"""Config module exports."""

from barrelwatch.config.loader import find_config_file, load_config
from barrelwatch.config.models import (
    BarrelWatchConfig,
    DirectoryEntry,
    ExportMode,
    LoggingConfig,
    LogOutputConfig,
)
from barrelwatch.config.normalize import DirectoryWatchConfig, normalize_directory

__all__ = [
    "load_config",
    "find_config_file",
    "BarrelWatchConfig",
    "DirectoryEntry",
    "DirectoryWatchConfig",
    "ExportMode",
    "LoggingConfig",
    "LogOutputConfig",
    "normalize_directory",
]
