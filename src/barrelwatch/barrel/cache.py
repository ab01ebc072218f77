"""Per-directory export cache.

One bucket per watched root, mapping absolute file path to its last known
``FileRecord``. The cache is the single source of truth for generation and
lives as long as its session.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import structlog

from barrelwatch.barrel.models import FileRecord

logger = structlog.get_logger()


class ExportCache:
    """Directory-keyed store of file records.

    Not safe for concurrent mutation; a session owns exactly one instance and
    mutates it from a single event loop.
    """

    def __init__(self) -> None:
        self._buckets: dict[Path, dict[Path, FileRecord]] = {}

    def roots(self) -> list[Path]:
        return list(self._buckets)

    def get(self, root: Path, path: Path) -> FileRecord | None:
        return self._buckets.get(root, {}).get(path)

    def records(self, root: Path) -> list[FileRecord]:
        """Snapshot of a bucket's records."""
        return list(self._buckets.get(root, {}).values())

    def count(self, root: Path) -> int:
        return len(self._buckets.get(root, {}))

    def upsert(self, root: Path, record: FileRecord) -> None:
        self._buckets.setdefault(root, {})[record.absolute_path] = record

    def remove(self, root: Path, path: Path) -> FileRecord | None:
        """Drop one record; returns it if it was present."""
        return self._buckets.get(root, {}).pop(path, None)

    def remove_under(self, root: Path, directory: Path) -> list[FileRecord]:
        """Drop every record located beneath ``directory``."""
        bucket = self._buckets.get(root, {})
        doomed = [path for path in bucket if path.is_relative_to(directory)]
        return [bucket.pop(path) for path in doomed]

    def replace(self, root: Path, records: Iterable[FileRecord]) -> None:
        """Swap a whole bucket (scanner path)."""
        self._buckets[root] = {record.absolute_path: record for record in records}

    def clear(self) -> None:
        self._buckets.clear()
        logger.debug("cache_cleared", verbose=True)

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    def __contains__(self, root: object) -> bool:
        return root in self._buckets
