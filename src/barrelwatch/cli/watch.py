"""barrelwatch watch command - generate, then keep indexes current."""

import asyncio
from pathlib import Path

import click

from barrelwatch.barrel.session import WatchSession
from barrelwatch.cli.utils import load_project, print_summary
from barrelwatch.core.progress import pluralize, status
from barrelwatch.daemon.lifecycle import run_watch


@click.command()
@click.argument("path", default=None, required=False, type=click.Path(exists=True, path_type=Path))
@click.option("--debounce-ms", type=click.IntRange(min=0), help="Override the debounce delay")
@click.pass_context
def watch_command(ctx: click.Context, path: Path | None, debounce_ms: int | None) -> None:
    """Generate every index, then regenerate on file changes until interrupted.

    PATH is the project root. If not specified, auto-detects by walking
    up from the current directory to the nearest barrelwatch.yaml.
    """
    project_root, config = load_project(ctx, path, debounce_ms=debounce_ms)
    print_summary(project_root, config)

    session = WatchSession(config, project_root)
    status(
        f"Watching {pluralize(len(session.directories), 'directory', 'directories')} "
        "(Ctrl+C to stop)",
        style="success",
    )
    asyncio.run(run_watch(session))
    status("Stopped", style="info")
