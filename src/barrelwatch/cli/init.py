"""barrelwatch init command - write a starter configuration file."""

from pathlib import Path

import click

from barrelwatch.config.constants import (
    CONFIG_FILENAMES,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_EXTENSIONS,
    DEFAULT_INDEX_EXTENSION,
)
from barrelwatch.config.models import ExportMode
from barrelwatch.core.progress import status


def render_config_template(dirs: list[str] | None = None) -> str:
    """Build the commented barrelwatch.yaml written by ``init``."""
    lines = [
        "# barrelwatch configuration",
        "",
        "# Directories that get a generated index file. Each entry is either a",
        "# path relative to this file or a mapping with per-directory settings:",
        "#   - dir: src/components",
        "#     match: ['**/*.tsx']",
        "#     exclude: ['**/*.test.tsx', '**/*.stories.tsx']",
        "#     mode: exports-and-imports",
        "#     index_extension: .js",
        "dirs:",
    ]
    if dirs:
        lines.extend(f"  - {d}" for d in dirs)
    else:
        lines[-1] = "dirs: []"
    lines.append("")

    lines.append("# File extensions that participate in the index.")
    lines.append(f"# extensions: [{', '.join(DEFAULT_EXTENSIONS)}]")
    lines.append("")

    lines.append(f"# Export mode: {', '.join(m.value for m in ExportMode)}")
    lines.append(f"# mode: {ExportMode.EXPORTS_ONLY.value}")
    lines.append("")

    lines.append("# Quiet period (ms) after the last change before regenerating.")
    lines.append(f"# debounce_ms: {DEFAULT_DEBOUNCE_MS}")
    lines.append("")

    lines.append("# Extension of the generated index file.")
    lines.append(f"# index_extension: {DEFAULT_INDEX_EXTENSION}")
    lines.append("")

    lines.append("# Log level: silent, error, warn, info, debug, verbose")
    lines.append("# log_level: info")
    lines.append("")

    return "\n".join(lines)


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--dir", "dirs", multiple=True, help="Directory to watch (repeatable)")
@click.option("--force", is_flag=True, help="Overwrite an existing configuration file")
def init_command(path: Path, dirs: tuple[str, ...], force: bool) -> None:
    """Write a starter barrelwatch.yaml into PATH (default: current directory)."""
    project_root = path.resolve()
    existing = [project_root / name for name in CONFIG_FILENAMES if (project_root / name).exists()]

    if existing and not force:
        status(f"Already initialized: {existing[0]}", style="info")
        status("Use --force to overwrite", style="info")
        return

    config_path = project_root / CONFIG_FILENAMES[0]
    config_path.write_text(render_config_template(list(dirs)))
    status(f"Wrote {config_path}", style="success")
