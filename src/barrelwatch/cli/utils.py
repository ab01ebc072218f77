"""CLI utilities."""

from pathlib import Path
from typing import Any

import click
from rich.table import Table

from barrelwatch.config.constants import CONFIG_FILENAMES
from barrelwatch.config.loader import load_config
from barrelwatch.config.models import BarrelWatchConfig
from barrelwatch.config.normalize import normalize_directories
from barrelwatch.core.errors import BarrelWatchError, ConfigError
from barrelwatch.core.logging import configure_logging
from barrelwatch.core.progress import get_console


def find_project_root(start_path: Path | None = None) -> Path:
    """Find the project root from the given path.

    Walks up the directory tree looking for a barrelwatch config file.
    Falls back to the starting directory when none is found.
    """
    if start_path is None:
        start_path = Path.cwd()

    start = start_path.resolve()
    current = start
    while True:
        if any((current / name).is_file() for name in CONFIG_FILENAMES):
            return current
        if current == current.parent:
            return start
        current = current.parent


def load_project(
    ctx: click.Context,
    path: Path | None,
    **overrides: Any,
) -> tuple[Path, BarrelWatchConfig]:
    """Resolve the project root, load its config and apply logging settings.

    Raises:
        click.ClickException: If the configuration is invalid
    """
    project_root = path.resolve() if path is not None else find_project_root()

    try:
        config = load_config(project_root, **overrides)
    except BarrelWatchError as e:
        raise click.ClickException(str(e)) from e

    cli_level = (ctx.obj or {}).get("log_level")
    if cli_level is not None:
        config.logging.level = cli_level
    configure_logging(config=config.logging)

    if not config.dirs:
        missing = ConfigError.missing_required("dirs")
        raise click.ClickException(
            f"{missing}\nAdd a 'dirs' list to barrelwatch.yaml, or run 'barrelwatch init'."
        )
    return project_root, config


def print_summary(project_root: Path, config: BarrelWatchConfig) -> None:
    """Print a table of the watched directories and their effective settings."""
    console = get_console()
    table = Table(title=f"barrelwatch · {project_root}", title_justify="left", box=None)
    table.add_column("Directory", style="cyan")
    table.add_column("Mode")
    table.add_column("Include", style="dim")
    table.add_column("Exclude", style="dim")
    table.add_column("Index", style="green")

    for directory in normalize_directories(config, project_root):
        try:
            shown = str(directory.root.relative_to(project_root)) or "."
        except ValueError:
            shown = str(directory.root)
        table.add_row(
            shown,
            directory.mode.value,
            ", ".join(directory.include_patterns),
            ", ".join(directory.exclude_patterns) or "-",
            directory.index_filename,
        )

    console.print(table)
    console.print(
        f"  extensions: {', '.join(config.extensions)}  debounce: {config.debounce_ms}ms",
        style="dim",
        highlight=False,
    )
    console.print()
