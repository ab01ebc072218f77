"""Per-directory debounce of index regeneration.

Bursts of events for one root (truncate + write, editors saving several files)
collapse into a single regeneration once the root has been quiet for the
configured delay. The callback always sees the cache as it is when the timer
fires, never a snapshot from when it was armed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path

import structlog

logger = structlog.get_logger()


class DebounceScheduler:
    """Keeps at most one pending regeneration per root.

    Timers run on an asyncio event loop; scheduling again for the same root
    cancels the previous timer instead of stacking a second one.
    """

    def __init__(
        self,
        callback: Callable[[Path], object],
        *,
        min_delay_ms: int = 0,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._callback = callback
        self._min_delay_ms = min_delay_ms
        self._loop = loop
        self._pending: dict[Path, asyncio.TimerHandle] = {}

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError as e:
                raise RuntimeError(
                    "DebounceScheduler needs a running event loop; "
                    "pass loop= when scheduling from synchronous code"
                ) from e
        return self._loop

    def schedule(self, root: Path, delay_ms: int) -> None:
        """(Re)arm the timer for ``root``."""
        existing = self._pending.pop(root, None)
        if existing is not None:
            existing.cancel()
            logger.debug("debounce_reset", root=str(root), verbose=True)

        delay_ms = max(delay_ms, self._min_delay_ms)
        self._pending[root] = self._get_loop().call_later(delay_ms / 1000, self._fire, root)
        logger.debug("debounce_scheduled", root=str(root), delay_ms=delay_ms)

    def _fire(self, root: Path) -> None:
        self._pending.pop(root, None)
        logger.debug("debounce_fired", root=str(root))
        try:
            self._callback(root)
        except Exception as e:
            logger.error(
                "scheduled_generation_failed",
                root=str(root),
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )

    def is_pending(self, root: Path) -> bool:
        return root in self._pending

    def pending_roots(self) -> list[Path]:
        return list(self._pending)

    def cancel(self, root: Path) -> bool:
        """Cancel the pending regeneration for ``root``, if any."""
        handle = self._pending.pop(root, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> None:
        for handle in self._pending.values():
            handle.cancel()
        self._pending.clear()
