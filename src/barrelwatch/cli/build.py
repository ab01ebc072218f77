"""barrelwatch build command - one-shot index generation."""

from pathlib import Path

import click

from barrelwatch.barrel.session import WatchSession
from barrelwatch.cli.utils import load_project, print_summary
from barrelwatch.core.progress import pluralize, spinner, status


@click.command()
@click.argument("path", default=None, required=False, type=click.Path(exists=True, path_type=Path))
@click.pass_context
def build_command(ctx: click.Context, path: Path | None) -> None:
    """Generate the index file of every configured directory once.

    PATH is the project root. If not specified, auto-detects by walking
    up from the current directory to the nearest barrelwatch.yaml.
    """
    project_root, config = load_project(ctx, path)
    print_summary(project_root, config)

    session = WatchSession(config, project_root)
    with spinner("Generating indexes"):
        session.on_build_start()

    written = [d for d in session.directories.values() if d.index_path.exists()]
    status(
        f"{pluralize(len(written), 'index', 'indexes')} up to date "
        f"({pluralize(len(session.cache), 'file')} tracked)",
        style="success",
    )
