"""Directory watchers that feed a session with tagged file events.

A watcher is a stream: roots are registered with ``add``, events are consumed
from ``events()`` by a single consumer, and ``close`` ends the stream.

Implementations:
- ``WatchfilesWatcher``: native filesystem notifications via watchfiles
- ``EventChannel``: in-process queue for hosts that deliver their own events
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import AsyncIterator, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

import structlog
from watchfiles import Change, awatch

from barrelwatch.barrel.models import FileAction
from barrelwatch.barrel.scanner import PRUNED_DIRS, walk_files

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class FileEvent:
    """One watcher notification for an absolute path."""

    action: FileAction
    path: Path


class DirectoryWatcher(Protocol):
    """What a session needs from a watcher."""

    def add(self, path: Path) -> None: ...

    def events(self) -> AsyncIterator[FileEvent]: ...

    def close(self) -> None: ...


def collapse_changes(changes: Iterable[tuple[Change, str]]) -> list[FileEvent]:
    """Turn one unordered watchfiles batch into ordered file events.

    Several changes for one path (an editor's delete + recreate save) collapse
    into a single event that matches what is on disk now. Directories that
    appeared expand into ``add`` events for the files inside them.
    """
    kinds: dict[Path, set[Change]] = defaultdict(set)
    for change, raw_path in changes:
        kinds[Path(raw_path)].add(change)

    events: list[FileEvent] = []
    for path in sorted(kinds):
        if any(part in PRUNED_DIRS for part in path.parts):
            continue
        if path.is_dir():
            if Change.added in kinds[path]:
                events.extend(FileEvent(FileAction.ADD, p) for p in walk_files(path))
            continue
        if not path.exists():
            events.append(FileEvent(FileAction.UNLINK, path))
        elif kinds[path] == {Change.added}:
            events.append(FileEvent(FileAction.ADD, path))
        else:
            events.append(FileEvent(FileAction.CHANGE, path))
    return events


@dataclass
class WatchfilesWatcher:
    """Recursive watcher over the registered roots using ``watchfiles.awatch``.

    Roots registered while the stream is running take effect by restarting
    ``awatch`` with the new set.
    """

    batch_ms: int = 50
    _roots: list[Path] = field(default_factory=list, init=False)
    _stop_event: asyncio.Event = field(default_factory=asyncio.Event, init=False)
    _restart: bool = field(default=False, init=False)

    @property
    def roots(self) -> list[Path]:
        return list(self._roots)

    def add(self, path: Path) -> None:
        if path in self._roots:
            return
        self._roots.append(path)
        self._restart = True
        logger.debug("watching_directory", root=str(path))

    def close(self) -> None:
        self._stop_event.set()

    async def events(self) -> AsyncIterator[FileEvent]:
        while not self._stop_event.is_set():
            if not self._roots:
                logger.warning("no_watchable_dirs")
                return
            self._restart = False
            async for changes in awatch(
                *self._roots,
                debounce=self.batch_ms,
                stop_event=self._stop_event,
                ignore_permission_denied=True,
            ):
                for event in collapse_changes(changes):
                    yield event
                if self._restart:
                    logger.info("watcher_restart_requested", reason="new_roots")
                    break


class EventChannel:
    """In-process watcher: the host pushes events, the session consumes them."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[FileEvent | None] = asyncio.Queue()
        self._roots: list[Path] = []
        self._closed = False

    @property
    def roots(self) -> list[Path]:
        return list(self._roots)

    def add(self, path: Path) -> None:
        if path not in self._roots:
            self._roots.append(path)

    def emit(self, action: FileAction | str, path: Path) -> None:
        """Queue one event; ignored after ``close``."""
        if self._closed:
            return
        self._queue.put_nowait(FileEvent(FileAction(action), path))

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(None)

    async def events(self) -> AsyncIterator[FileEvent]:
        while True:
            event = await self._queue.get()
            if event is None:
                self._queue.task_done()
                return
            yield event
            # The consumer has finished with the event once it asks for the next
            self._queue.task_done()

    async def drain(self) -> None:
        """Wait until every queued event has been handled by the consumer."""
        await self._queue.join()
