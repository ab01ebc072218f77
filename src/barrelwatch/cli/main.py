"""barrelwatch CLI - keeps barrel index files in sync with their directories."""

import click

from barrelwatch.cli.build import build_command
from barrelwatch.cli.init import init_command
from barrelwatch.cli.watch import watch_command
from barrelwatch.core.logging import configure_logging

LOG_LEVELS = ("silent", "error", "warn", "info", "debug", "verbose")


@click.group()
@click.version_option(version="0.1.0", prog_name="barrelwatch")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Override the configured log level",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, log_level: str | None) -> None:
    """barrelwatch - generate and maintain index files for source directories."""
    if log_level is None and verbose:
        log_level = "debug"
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level.lower() if log_level else None
    configure_logging(level=ctx.obj["log_level"] or "info")


cli.add_command(build_command, name="build")
cli.add_command(watch_command, name="watch")
cli.add_command(init_command, name="init")


if __name__ == "__main__":
    cli()
