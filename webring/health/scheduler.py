"""Health scheduler — keeps member health current.

On start it scans every member once, then probes a single member per
interval, walking the store's check cursor round-robin. Probes run in a
thread pool so the blocking fetch never holds the event loop or the
store lock; only the result commit touches the store.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

from ..ring.models import HealthStatus, Member
from ..ring.store import RingStore
from .classifier import classify_site

logger = logging.getLogger(__name__)

CHECK_INTERVAL = 60.0


class HealthScheduler:
    """Startup scan followed by one member check per interval."""

    def __init__(
        self,
        store: RingStore,
        check: Callable[[str], HealthStatus] = classify_site,
        interval: float = CHECK_INTERVAL,
    ) -> None:
        self.store = store
        self.check = check
        self.interval = interval
        self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="health")
        self._task: asyncio.Task[None] | None = None
        self._running = False

    async def start(self) -> None:
        """Launch the scan loop in the background."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run(), name="health-scheduler")
        logger.info(
            "Health scheduler started: %d members, interval=%ss",
            len(self.store), self.interval,
        )

    async def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._executor.shutdown(wait=False)
        logger.info("Health scheduler stopped")

    async def scan_all(self) -> dict[str, HealthStatus]:
        """Classify every member once, in load order."""
        results = {}
        for member in self.store.members():
            results[member.id] = await self._probe(member)

        counts = self.store.counts()
        logger.info(
            "Startup scan complete: %d/%d members healthy",
            counts["healthy"], counts["total"],
        )
        return results

    async def check_next(self) -> tuple[Member, HealthStatus] | None:
        """Probe the member under the check cursor."""
        member = self.store.next_member_to_check()
        if member is None:
            return None
        return member, await self._probe(member)

    async def _probe(self, member: Member) -> HealthStatus:
        loop = asyncio.get_running_loop()
        try:
            status = await loop.run_in_executor(self._executor, self.check, member.url)
        except Exception:
            logger.exception("Health check for %s failed", member.id)
            status = HealthStatus.UNHEALTHY_DOWN
        self.store.set_health(member.id, status)
        logger.debug("Check %s: %s", member.id, status.value)
        return status

    async def _run(self) -> None:
        try:
            await self.scan_all()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Startup scan error")

        while self._running:
            try:
                await asyncio.sleep(self.interval)
                if not self._running:
                    break
                await self.check_next()
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Health check error")
