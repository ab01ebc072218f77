"""Filesystem watching and the long-running watch loop."""

from barrelwatch.daemon.lifecycle import run_watch
from barrelwatch.daemon.watcher import (
    DirectoryWatcher,
    EventChannel,
    FileEvent,
    WatchfilesWatcher,
    collapse_changes,
)

__all__ = [
    "DirectoryWatcher",
    "EventChannel",
    "FileEvent",
    "WatchfilesWatcher",
    "collapse_changes",
    "run_watch",
]
