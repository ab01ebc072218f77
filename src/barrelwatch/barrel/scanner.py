"""One-shot directory scan that seeds a cache bucket.

The walk is iterative with an explicit stack. Directories are de-duplicated by
their resolved path so symlink cycles terminate, and depth is bounded.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from pathlib import Path

import structlog

from barrelwatch.barrel.analyzer import ExportAnalyzer
from barrelwatch.barrel.cache import ExportCache
from barrelwatch.barrel.eligibility import is_eligible, is_represented, needs_side_effect_import
from barrelwatch.barrel.models import FileRecord
from barrelwatch.config.constants import DEFAULT_MAX_SCAN_DEPTH
from barrelwatch.config.normalize import DirectoryWatchConfig
from barrelwatch.core.errors import ErrorCode

logger = structlog.get_logger()

# Never descended into, whatever the include patterns say
PRUNED_DIRS: frozenset[str] = frozenset({".git", ".svn", ".hg", ".bzr", "node_modules"})


def walk_files(root: Path, *, max_depth: int = DEFAULT_MAX_SCAN_DEPTH) -> list[Path]:
    """Collect every regular file beneath ``root``."""
    files: list[Path] = []
    visited: set[Path] = set()
    stack: list[tuple[Path, int]] = [(root, 0)]

    while stack:
        current, depth = stack.pop()
        try:
            real = current.resolve()
        except OSError:
            continue
        if real in visited:
            logger.debug("scan_cycle_skipped", path=str(current), verbose=True)
            continue
        visited.add(real)

        try:
            entries = sorted(os.scandir(current), key=lambda e: e.name)
        except OSError as e:
            logger.warning("scan_directory_unreadable", path=str(current), error=str(e))
            continue

        for entry in entries:
            path = current / entry.name
            try:
                if entry.is_dir():
                    if entry.name in PRUNED_DIRS:
                        continue
                    if depth + 1 > max_depth:
                        logger.warning("scan_depth_limit", path=str(path), max_depth=max_depth)
                        continue
                    stack.append((path, depth + 1))
                elif entry.is_file():
                    files.append(path)
            except OSError:
                # Entry vanished between listing and stat
                continue

    return files


class DirectoryScanner:
    """Builds a root's bucket from disk and generates its index immediately."""

    def __init__(
        self,
        cache: ExportCache,
        analyzer: ExportAnalyzer,
        extensions: Sequence[str],
        generate: Callable[[DirectoryWatchConfig], bool],
        *,
        max_depth: int = DEFAULT_MAX_SCAN_DEPTH,
    ) -> None:
        self._cache = cache
        self._analyzer = analyzer
        self._extensions = tuple(extensions)
        self._generate = generate
        self._max_depth = max_depth

    def scan(self, directory: DirectoryWatchConfig) -> list[FileRecord] | None:
        """Return the records for ``directory``, or None when the root is missing."""
        if not directory.root.is_dir():
            logger.warning(
                "directory_missing",
                root=str(directory.root),
                error_code=ErrorCode.SCAN_DIRECTORY_MISSING.name,
            )
            return None

        records: list[FileRecord] = []
        for path in walk_files(directory.root, max_depth=self._max_depth):
            if not is_eligible(path, directory, self._extensions):
                continue
            shape = self._analyzer.analyze_file(path)
            if not is_represented(shape, directory.mode):
                continue
            records.append(
                FileRecord.build(
                    directory.root,
                    path,
                    shape,
                    side_effect_import=needs_side_effect_import(shape, directory.mode),
                )
            )
        return records

    def process(self, directory: DirectoryWatchConfig) -> int:
        """Replace the bucket for ``directory`` and regenerate its index.

        Returns the number of records cached.
        """
        logger.debug("directory_scan_started", root=str(directory.root), verbose=True)
        records = self.scan(directory)
        if records is None:
            return 0

        self._cache.replace(directory.root, records)
        logger.info("directory_scanned", root=str(directory.root), files=len(records))
        self._generate(directory)
        return len(records)
