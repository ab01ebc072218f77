"""Renders a cache bucket into a barrel file and writes it.

Output layout::

    <HEADER>
    // Default and named exports
    export { default as button } from './button';
    export * from './button';

    // Default exports only
    export { default as card } from './card';

    // Named exports only
    export * from './hooks';

    // Side-effect imports
    import './polyfills';

Each group is sorted by module name in code-point order, so output does not
depend on discovery order.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

import structlog

from barrelwatch.barrel.cache import ExportCache
from barrelwatch.barrel.models import FileRecord
from barrelwatch.config.constants import HEADER
from barrelwatch.config.normalize import DirectoryWatchConfig
from barrelwatch.core.errors import BarrelWatchError, GenerationError

logger = structlog.get_logger()


def _sorted(records: Iterable[FileRecord]) -> list[FileRecord]:
    return sorted(records, key=lambda r: r.module_name)


def _default_line(record: FileRecord) -> str:
    return f"export {{ default as {record.export_name} }} from './{record.module_name}';"


def _named_line(record: FileRecord) -> str:
    return f"export * from './{record.module_name}';"


def _import_line(record: FileRecord) -> str:
    return f"import './{record.module_name}';"


def render(records: Iterable[FileRecord]) -> str | None:
    """Render records into index file content; None when nothing is exported."""
    both: list[FileRecord] = []
    default_only: list[FileRecord] = []
    named_only: list[FileRecord] = []
    side_effects: list[FileRecord] = []

    for record in records:
        if record.has_default and record.has_named:
            both.append(record)
        elif record.has_default:
            default_only.append(record)
        elif record.has_named:
            named_only.append(record)
        elif record.side_effect_import:
            side_effects.append(record)

    sections: list[str] = []
    if both:
        lines = ["// Default and named exports"]
        for record in _sorted(both):
            lines += [_default_line(record), _named_line(record)]
        sections.append("\n".join(lines))
    if default_only:
        lines = ["// Default exports only", *map(_default_line, _sorted(default_only))]
        sections.append("\n".join(lines))
    if named_only:
        lines = ["// Named exports only", *map(_named_line, _sorted(named_only))]
        sections.append("\n".join(lines))
    if side_effects:
        lines = ["// Side-effect imports", *map(_import_line, _sorted(side_effects))]
        sections.append("\n".join(lines))

    if not sections:
        return None
    return HEADER + "\n\n".join(sections) + "\n"


def write_atomic(path: Path, content: str) -> None:
    """Write ``content`` through a temp file in the same directory."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise


class IndexGenerator:
    """Writes ``<root>/<index_filename>`` from the cache."""

    def __init__(self, cache: ExportCache) -> None:
        self._cache = cache

    def write(self, directory: DirectoryWatchConfig, content: str) -> bool:
        """Write unless the file already holds ``content``; returns True if written.

        Raises:
            GenerationError: When the file cannot be written.
        """
        index_path = directory.index_path
        with contextlib.suppress(OSError, UnicodeDecodeError):
            if index_path.read_text(encoding="utf-8") == content:
                logger.debug("index_unchanged", path=str(index_path), verbose=True)
                return False
        try:
            write_atomic(index_path, content)
        except OSError as e:
            raise GenerationError.write_failed(str(index_path), str(e)) from e
        return True

    def generate(self, directory: DirectoryWatchConfig) -> bool:
        """Regenerate one root's index; returns True if the file was written."""
        records = self._cache.records(directory.root)
        logger.debug(
            "index_generation_started",
            root=str(directory.root),
            files=len(records),
            verbose=True,
        )

        content = render(records)
        if content is None:
            logger.warning("index_skipped_empty", root=str(directory.root))
            return False

        try:
            written = self.write(directory, content)
        except BarrelWatchError as e:
            logger.error("index_write_failed", root=str(directory.root), **e.to_dict())
            return False

        if written:
            logger.info(
                "index_generated",
                path=str(directory.index_path),
                entries=len(records),
            )
        return written
