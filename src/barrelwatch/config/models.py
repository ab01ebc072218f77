"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config() (CLI overrides)
2. Environment variables (BARRELWATCH__KEY)
3. Project YAML (barrelwatch.yaml / .barrelwatch.yaml)
4. Built-in defaults (this file)

Environment Variable Format:
    BARRELWATCH__<KEY>=<VALUE>

Examples:
    BARRELWATCH__DEBOUNCE_MS=500
    BARRELWATCH__MODE=exports-and-imports
    BARRELWATCH__LOGGING__LEVEL=debug
"""

from enum import StrEnum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from barrelwatch.config.constants import (
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_EXTENSIONS,
    DEFAULT_INDEX_EXTENSION,
    DEFAULT_MAX_SCAN_DEPTH,
)

LogLevel = Literal["silent", "error", "warn", "info", "debug", "verbose"]


class ExportMode(StrEnum):
    """How files are represented in the generated index."""

    # Only files with at least one export are re-exported
    EXPORTS_ONLY = "exports-only"
    # Files with exports are re-exported, the rest become side-effect imports
    EXPORTS_AND_IMPORTS = "exports-and-imports"
    # Every eligible file is represented (same policy as EXPORTS_AND_IMPORTS)
    IMPORT_ALL = "import-all"


def _check_extension(value: str) -> str:
    if not value.startswith(".") or len(value) < 2:
        raise ValueError(f"Extension must start with '.', got {value!r}")
    return value


def _lower_level(value: object) -> object:
    if isinstance(value, str):
        value = value.lower()
        return "warn" if value == "warning" else value
    return value


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        return _lower_level(v)

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        BARRELWATCH__LOGGING__LEVEL: silent, error, warn, info, debug, verbose
        BARRELWATCH__LOGGING__TIMESTAMPS: Prefix log lines with the time
    """

    level: LogLevel = Field(
        default="info",
        description="Root log level. 'verbose' reports every cache decision.",
    )
    timestamps: bool = Field(
        default=True,
        description="Prefix log lines with a wall-clock timestamp.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        return _lower_level(v)


class DirectoryEntry(BaseModel):
    """One watched directory as written by the user.

    A bare string in ``dirs`` is shorthand for ``{dir: <string>}``.
    """

    dir: str
    match: str | list[str] | None = Field(
        default=None,
        description="Include glob(s) relative to the directory. Default: everything.",
    )
    exclude: str | list[str] | None = Field(
        default=None,
        description="Exclude glob(s). Exclusion wins over inclusion. Default: nothing.",
    )
    mode: ExportMode | None = Field(
        default=None,
        description="Overrides the global mode for this directory.",
    )
    index_extension: str | None = Field(
        default=None,
        description="Overrides the global index file extension for this directory.",
    )

    @field_validator("index_extension")
    @classmethod
    def validate_index_extension(cls, v: str | None) -> str | None:
        return v if v is None else _check_extension(v)


class BarrelWatchConfig(BaseModel):
    """Root configuration for barrelwatch.

    All settings can be configured via:
    1. Environment variables: BARRELWATCH__KEY
    2. barrelwatch.yaml in the project root
    3. Direct kwargs to load_config()
    """

    dirs: list[str | DirectoryEntry] = Field(
        default_factory=list,
        description="Directories that get a generated index file.",
    )
    extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTENSIONS),
        description="File extensions that participate in the index.",
    )
    debounce_ms: int = Field(
        default=DEFAULT_DEBOUNCE_MS,
        ge=0,
        description="Quiet period after the last change before an index is regenerated.",
    )
    min_debounce_ms: int = Field(
        default=0,
        ge=0,
        description="Lower bound applied to every debounce delay.",
    )
    mode: ExportMode = Field(
        default=ExportMode.EXPORTS_ONLY,
        description="Global default export mode.",
    )
    index_extension: str = Field(
        default=DEFAULT_INDEX_EXTENSION,
        description="Extension of the generated index file (index.ts, index.js, ...).",
    )
    max_scan_depth: int = Field(
        default=DEFAULT_MAX_SCAN_DEPTH,
        ge=1,
        description="Maximum directory depth walked by the scanner.",
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        return [_check_extension(ext) for ext in v]

    @field_validator("index_extension")
    @classmethod
    def validate_index_extension(cls, v: str) -> str:
        return _check_extension(v)
