"""Normalization of user directory entries into per-root watch configs.

Runs once when a session starts. The resulting ``DirectoryWatchConfig`` objects
are immutable; a different configuration needs a new session.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from barrelwatch.config.constants import DEFAULT_INCLUDE_PATTERNS, INDEX_BASENAME
from barrelwatch.config.models import BarrelWatchConfig, DirectoryEntry, ExportMode


@dataclass(frozen=True)
class DirectoryWatchConfig:
    """Effective settings for one watched root."""

    root: Path
    include_patterns: tuple[str, ...] = DEFAULT_INCLUDE_PATTERNS
    exclude_patterns: tuple[str, ...] = ()
    mode: ExportMode = ExportMode.EXPORTS_ONLY
    index_filename: str = f"{INDEX_BASENAME}.ts"

    @property
    def index_path(self) -> Path:
        """Absolute path of the generated index file."""
        return self.root / self.index_filename

    def contains(self, path: Path) -> bool:
        """Whether ``path`` lies inside this root (the root itself excluded)."""
        return path != self.root and path.is_relative_to(self.root)


def _as_patterns(value: str | list[str] | None) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def normalize_directory(
    entry: str | DirectoryEntry,
    config: BarrelWatchConfig,
    project_root: Path,
) -> DirectoryWatchConfig:
    """Merge one ``dirs`` entry with the global defaults."""
    if isinstance(entry, str):
        entry = DirectoryEntry(dir=entry)

    include = _as_patterns(entry.match) or DEFAULT_INCLUDE_PATTERNS
    index_extension = entry.index_extension or config.index_extension

    return DirectoryWatchConfig(
        root=(project_root / entry.dir).resolve(),
        include_patterns=include,
        exclude_patterns=_as_patterns(entry.exclude),
        mode=entry.mode or config.mode,
        index_filename=f"{INDEX_BASENAME}{index_extension}",
    )


def normalize_directories(
    config: BarrelWatchConfig,
    project_root: Path,
) -> list[DirectoryWatchConfig]:
    """Normalize every configured directory, dropping duplicate roots."""
    seen: dict[Path, DirectoryWatchConfig] = {}
    for entry in config.dirs:
        directory = normalize_directory(entry, config, project_root)
        seen.setdefault(directory.root, directory)
    return list(seen.values())
