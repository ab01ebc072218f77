"""Structured logging with multi-output support.

Supports:
- The tool's level vocabulary (silent, error, warn, info, debug, verbose)
- Verbose-tagged events that only surface at the ``verbose`` level
- Console suppression during Rich live displays (spinners)
- Separate console vs file log levels
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from barrelwatch.config.models import LoggingConfig

# Above CRITICAL so that nothing passes the filtering bound logger.
SILENT = logging.CRITICAL + 10

_LEVEL_MAP = {
    "silent": SILENT,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "verbose": logging.DEBUG,
}

_verbose_enabled = False


def level_to_int(level: str) -> int:
    """Translate a level name to a stdlib logging level."""
    return _LEVEL_MAP.get(level.lower(), logging.INFO)


def is_verbose_enabled() -> bool:
    return _verbose_enabled


def _drop_verbose(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if event_dict.pop("verbose", False) and not _verbose_enabled:
        raise structlog.DropEvent
    return event_dict


class ConsoleSuppressingFilter(logging.Filter):
    """Filter that blocks console output while a Rich live display is active.

    File handlers keep receiving records.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: ARG002
        # Import here to avoid circular dependency
        from barrelwatch.core.progress import is_console_suppressed

        return not is_console_suppressed()


def configure_logging(
    *,
    config: LoggingConfig | None = None,
    json_format: bool = False,
    level: str = "info",
    timestamps: bool = True,
) -> None:
    """Configure structlog. Pass config for multi-output, or use simple params.

    Args:
        config: Logging configuration with outputs
        json_format: Use JSON format for simple setup
        level: Default log level name
        timestamps: Prefix events with a wall-clock timestamp
    """
    from barrelwatch.config.models import LoggingConfig, LogOutputConfig

    global _verbose_enabled

    if config is None:
        config = LoggingConfig(
            level=level,
            timestamps=timestamps,
            outputs=[LogOutputConfig(format="json" if json_format else "console")],
        )

    default_level = level_to_int(config.level)
    _verbose_enabled = config.level == "verbose"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _drop_verbose,  # type: ignore[list-item]
        structlog.processors.add_log_level,
    ]
    if config.timestamps:
        shared_processors.append(
            structlog.processors.TimeStamper(fmt="%H:%M:%S", key="timestamp"),
        )

    _configure_stdlib_logging(config, shared_processors, default_level)


def _create_handler(destination: str, is_console: bool = False) -> logging.Handler:
    """Create handler for stderr, stdout, or file path."""
    handler: logging.Handler
    if destination == "stderr":
        handler = logging.StreamHandler(sys.stderr)
    elif destination == "stdout":
        handler = logging.StreamHandler(sys.stdout)
    else:
        path = Path(destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a")

    if is_console:
        handler.addFilter(ConsoleSuppressingFilter())

    return handler


def _configure_stdlib_logging(
    config: LoggingConfig,
    shared_processors: list[structlog.types.Processor],
    default_level: int,
) -> None:
    """Configure logging via stdlib (proper file handle management)."""
    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(default_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Don't cache - allows reconfiguration and respects level changes
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(default_level)

    # watchfiles logs every raw change at DEBUG, including our own index writes
    logging.getLogger("watchfiles.main").setLevel(logging.WARNING)

    if default_level >= SILENT:
        return

    for output in config.outputs:
        output_level = level_to_int(output.level or config.level)
        is_console = output.destination in ("stderr", "stdout")

        if output.format == "json":
            formatter = structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
                foreign_pre_chain=shared_processors,
            )
        else:
            formatter = structlog.stdlib.ProcessorFormatter(
                processor=structlog.dev.ConsoleRenderer(
                    colors=is_console and sys.stderr.isatty(),
                    pad_event_to=0,
                    pad_level=False,
                ),
                foreign_pre_chain=shared_processors,
            )

        handler = _create_handler(output.destination, is_console=is_console)
        handler.setLevel(output_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger  # type: ignore[no-any-return]
