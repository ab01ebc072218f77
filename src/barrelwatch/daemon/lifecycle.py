"""Watch loop lifecycle management."""

from __future__ import annotations

import asyncio
import contextlib
import signal
from collections.abc import Iterator

import structlog

from barrelwatch.barrel.session import WatchSession
from barrelwatch.daemon.watcher import DirectoryWatcher, WatchfilesWatcher

logger = structlog.get_logger()

_SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


@contextlib.contextmanager
def _signal_handlers(
    loop: asyncio.AbstractEventLoop,
    watcher: DirectoryWatcher,
    task: asyncio.Task[None],
) -> Iterator[None]:
    """First signal closes the watcher, a second one cancels the run task."""
    shutdown_count = 0

    def signal_handler() -> None:
        nonlocal shutdown_count
        shutdown_count += 1
        logger.info("shutdown_signal_received", count=shutdown_count)
        if shutdown_count == 1:
            watcher.close()
        else:
            task.cancel()

    installed: list[signal.Signals] = []
    for sig in _SHUTDOWN_SIGNALS:
        # Not available on every platform (e.g. Windows proactor loop)
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, signal_handler)
            installed.append(sig)
    try:
        yield
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


async def run_watch(
    session: WatchSession,
    watcher: DirectoryWatcher | None = None,
) -> None:
    """Populate every root, then keep indexes current until shutdown."""
    watcher = watcher or WatchfilesWatcher()
    session.on_server_ready(watcher)

    loop = asyncio.get_running_loop()
    task = loop.create_task(session.run(watcher))
    logger.info("watch_started", roots=[str(root) for root in session.watched_roots])

    with _signal_handlers(loop, watcher, task):
        try:
            await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            # Forced stop from a second signal
            logger.info("watch_cancelled")
        finally:
            watcher.close()
            session.close()

    logger.info("watch_stopped")
