"""Watch session: the host-facing shell around the index pipeline.

A session owns its cache, pending regenerations and merged configuration.
Nothing is process-global, so several sessions can coexist (one per project,
or one per test).

Lifecycle:
- ``on_build_start()``: scan every root once and write its index
- ``on_server_ready(watcher)``: scan, then register every root with the watcher
- ``run(watcher)``: consume watcher events until the stream ends
- ``close()``: cancel pending regenerations
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import structlog

from barrelwatch.barrel.analyzer import ExportAnalyzer
from barrelwatch.barrel.cache import ExportCache
from barrelwatch.barrel.eligibility import is_generated_index
from barrelwatch.barrel.generator import IndexGenerator
from barrelwatch.barrel.reconciler import EventReconciler
from barrelwatch.barrel.scanner import DirectoryScanner
from barrelwatch.barrel.scheduler import DebounceScheduler
from barrelwatch.config.models import BarrelWatchConfig
from barrelwatch.config.normalize import DirectoryWatchConfig, normalize_directories
from barrelwatch.core.errors import InternalError

if TYPE_CHECKING:
    from barrelwatch.daemon.watcher import DirectoryWatcher, FileEvent

logger = structlog.get_logger()


class LifecycleHooks(Protocol):
    """Capabilities a host tool drives."""

    def on_build_start(self) -> None: ...

    def on_server_ready(self, watcher: DirectoryWatcher) -> None: ...


class WatchSession:
    """Keeps every configured root's index consistent with its files.

    Usage::

        session = WatchSession(load_config(root), root)
        session.on_build_start()  # one-shot

        watcher = WatchfilesWatcher()
        session.on_server_ready(watcher)
        await session.run(watcher)  # until the watcher is closed

    Regenerations are debounced on an asyncio loop. Call ``handle_event`` from
    a coroutine, or pass ``loop=`` when driving the session from synchronous
    code; otherwise scheduling raises ``RuntimeError``.
    """

    def __init__(
        self,
        config: BarrelWatchConfig,
        project_root: Path,
        *,
        analyzer: ExportAnalyzer | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.config = config
        self.project_root = project_root.resolve()
        self.directories: dict[Path, DirectoryWatchConfig] = {
            directory.root: directory
            for directory in normalize_directories(config, self.project_root)
        }

        self.cache = ExportCache()
        self.analyzer = analyzer or ExportAnalyzer()
        self.generator = IndexGenerator(self.cache)
        self.scheduler = DebounceScheduler(
            self._regenerate,
            min_delay_ms=config.min_debounce_ms,
            loop=loop,
        )
        self.scanner = DirectoryScanner(
            self.cache,
            self.analyzer,
            config.extensions,
            self.generator.generate,
            max_depth=config.max_scan_depth,
        )
        self.reconciler = EventReconciler(self.cache, self.analyzer, config.extensions)

    @property
    def watched_roots(self) -> list[Path]:
        return list(self.directories)

    def _existing_directories(self, phase: str) -> list[DirectoryWatchConfig]:
        found: list[DirectoryWatchConfig] = []
        for directory in self.directories.values():
            if directory.root.is_dir():
                found.append(directory)
            else:
                logger.warning("directory_missing", root=str(directory.root), phase=phase)
        return found

    def _regenerate(self, root: Path) -> None:
        directory = self.directories.get(root)
        if directory is not None:
            self.generator.generate(directory)

    def scan_all(self, phase: str = "build") -> int:
        """Scan every existing root; returns the total number of cached files."""
        total = 0
        for directory in self._existing_directories(phase):
            try:
                total += self.scanner.process(directory)
            except Exception as e:
                err = InternalError.unexpected(
                    f"{type(e).__name__}: {e}", root=str(directory.root)
                )
                logger.error("directory_processing_failed", exc_info=True, **err.to_dict())
        return total

    def on_build_start(self) -> None:
        logger.info("build_started", directories=len(self.directories))
        self.scan_all("build")
        logger.info("build_completed", cached_files=len(self.cache))

    def on_server_ready(self, watcher: DirectoryWatcher) -> None:
        self.scan_all("watch")
        for directory in self.directories.values():
            if not directory.root.is_dir():
                continue
            watcher.add(directory.root)
        logger.info("watcher_configured", directories=len(self.directories))

    def rebuild(self) -> int:
        """Drop all cached state and rescan every root."""
        self.scheduler.cancel_all()
        self.cache.clear()
        return self.scan_all("rebuild")

    def roots_for(self, path: Path) -> Sequence[DirectoryWatchConfig]:
        """Watched roots whose tree contains ``path``."""
        return [d for d in self.directories.values() if d.contains(path)]

    def handle_event(self, event: FileEvent) -> bool:
        """Reconcile one event; returns True if any root was scheduled."""
        logger.debug("file_event", action=event.action.value, path=str(event.path))

        if is_generated_index(event.path, self.directories.values()):
            logger.debug("ignoring_generated_index", path=str(event.path), verbose=True)
            return False

        scheduled = False
        for directory in self.roots_for(event.path):
            if self.reconciler.apply(directory, event.action, event.path):
                self.scheduler.schedule(directory.root, self.config.debounce_ms)
                scheduled = True
        return scheduled

    async def run(self, watcher: DirectoryWatcher) -> None:
        """Consume watcher events one at a time until the stream ends."""
        try:
            async for event in watcher.events():
                self.handle_event(event)
        finally:
            self.close()

    def close(self) -> None:
        pending = self.scheduler.pending_roots()
        self.scheduler.cancel_all()
        if pending:
            logger.info("pending_regenerations_cancelled", count=len(pending))
