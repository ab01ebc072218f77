"""Applies watcher events to the export cache.

Per (root, file) the reconciler runs this state machine:

- ``unlink``: drop the record if present (or every record beneath a deleted
  directory)
- ``add`` / ``change``: drop the record when the file is gone, ineligible,
  or not represented under the root's mode; otherwise analyze and upsert,
  skipping ``change`` events that leave the export shape untouched and ``add``
  events for files already cached

``apply`` returns True only when the cache changed, which is the signal to
schedule a regeneration.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import structlog

from barrelwatch.barrel.analyzer import ExportAnalyzer
from barrelwatch.barrel.cache import ExportCache
from barrelwatch.barrel.eligibility import is_eligible, is_represented, needs_side_effect_import
from barrelwatch.barrel.models import FileAction, FileRecord
from barrelwatch.config.normalize import DirectoryWatchConfig

logger = structlog.get_logger()


class EventReconciler:
    """The only cache mutator once a session reaches steady state."""

    def __init__(
        self,
        cache: ExportCache,
        analyzer: ExportAnalyzer,
        extensions: Sequence[str],
    ) -> None:
        self._cache = cache
        self._analyzer = analyzer
        self._extensions = tuple(extensions)

    def apply(self, directory: DirectoryWatchConfig, action: FileAction, path: Path) -> bool:
        """Apply one event; returns True if the cache was mutated."""
        try:
            if action is FileAction.UNLINK:
                return self._unlink(directory, path)
            return self._upsert(directory, action, path)
        except Exception as e:
            # Keep the event loop alive; a later event retries this file
            logger.error(
                "reconcile_failed",
                root=str(directory.root),
                path=str(path),
                action=action.value,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            return False

    def _unlink(self, directory: DirectoryWatchConfig, path: Path) -> bool:
        if self._cache.remove(directory.root, path) is not None:
            logger.debug("cache_entry_removed", path=str(path), reason="unlink", verbose=True)
            return True

        # A deleted directory arrives as a single unlink for the directory path
        removed = self._cache.remove_under(directory.root, path)
        if removed:
            logger.debug(
                "cache_entries_removed",
                path=str(path),
                count=len(removed),
                reason="directory_unlink",
                verbose=True,
            )
        return bool(removed)

    def _evict(self, directory: DirectoryWatchConfig, path: Path, reason: str) -> bool:
        if self._cache.remove(directory.root, path) is None:
            return False
        logger.debug("cache_entry_removed", path=str(path), reason=reason, verbose=True)
        return True

    def _upsert(self, directory: DirectoryWatchConfig, action: FileAction, path: Path) -> bool:
        if not is_eligible(path, directory, self._extensions):
            return self._evict(directory, path, "ineligible")

        if not path.is_file():
            # Deleted again before the event was handled
            return self._evict(directory, path, "missing")

        shape = self._analyzer.analyze_file(path)
        if not is_represented(shape, directory.mode):
            return self._evict(directory, path, "mode_exclusion")

        existing = self._cache.get(directory.root, path)
        if action is FileAction.ADD and existing is not None:
            logger.debug("cache_entry_exists", path=str(path), verbose=True)
            return False

        record = FileRecord.build(
            directory.root,
            path,
            shape,
            side_effect_import=needs_side_effect_import(shape, directory.mode),
        )

        if existing is not None and existing.same_export_state(record):
            logger.debug("export_shape_unchanged", path=str(path), verbose=True)
            return False

        self._cache.upsert(directory.root, record)
        logger.debug(
            "cache_entry_updated" if existing is not None else "cache_entry_added",
            path=str(path),
            has_default=record.has_default,
            has_named=record.has_named,
            side_effect_import=record.side_effect_import,
            verbose=True,
        )
        return True
