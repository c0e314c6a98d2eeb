"""Background reshuffle timer.

Recomputes the ring order on a fixed interval. The seed only changes
once per epoch, so most ticks leave the order untouched.
"""

from __future__ import annotations

import asyncio
import logging

from .store import RingStore

logger = logging.getLogger(__name__)

_DEFAULT_INTERVAL = 60.0 * 60  # hourly


class RingReshuffler:
    """Periodically reshuffles a ``RingStore``."""

    def __init__(self, store: RingStore, interval: float = _DEFAULT_INTERVAL) -> None:
        self.store = store
        self.interval = interval
        self._task: asyncio.Task[None] | None = None
        self._running = False

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop(), name="ring-reshuffle")
        logger.info("Ring reshuffler started (interval=%ss)", self.interval)

    async def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Ring reshuffler stopped")

    async def _loop(self) -> None:
        while self._running:
            await asyncio.sleep(self.interval)
            try:
                self.store.shuffle()
            except Exception:
                logger.exception("Ring reshuffle failed")
