"""Ring store — members, per-member health, ring order and check cursor.

One ``RingStore`` is built at startup and shared by the API, the health
scheduler and the reshuffler. Members live in a flat list; the ring is
an index permutation over that list and neighbours are computed on
demand. All state sits behind a single readers-writer lock so a reader
always sees one consistent snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from .lock import ReadWriteLock
from .models import HealthStatus, Member, MemberHealth
from .ordering import WEEK_SECONDS, epoch_seed, shuffled_mapping

logger = logging.getLogger(__name__)


class MemberNotFoundError(LookupError):
    """Raised when a member id is not registered."""


class NoHealthyMembersError(LookupError):
    """Raised when the ring has no healthy member to offer as a neighbour."""


class RingStore:
    """In-memory authority for ring membership and health."""

    def __init__(
        self,
        members: Sequence[Member],
        epoch_seconds: int = WEEK_SECONDS,
    ) -> None:
        self._members: list[Member] = list(members)
        self._index: dict[str, int] = {m.id: i for i, m in enumerate(self._members)}
        self._health: list[MemberHealth] = [MemberHealth() for _ in self._members]
        self._mapping: list[int] = []
        self._check_index = 0
        self._epoch_seconds = epoch_seconds
        self._lock = ReadWriteLock()
        self.shuffle()

    def __len__(self) -> int:
        return len(self._members)

    # ── Ordering ────────────────────────────────────────────────────────

    def shuffle(self, now: float | None = None) -> bool:
        """Recompute the ring order for the current epoch.

        Returns True when the order actually changed.
        """
        seed = epoch_seed(now, self._epoch_seconds)
        mapping = shuffled_mapping(len(self._members), seed)
        with self._lock.write():
            changed = mapping != self._mapping
            self._mapping = mapping
        if changed:
            logger.info("Ring order updated (seed=%d, %d members)", seed, len(mapping))
        return changed

    @property
    def mapping(self) -> list[int]:
        with self._lock.read():
            return list(self._mapping)

    # ── Reads ───────────────────────────────────────────────────────────

    def get(self, member_id: str) -> Member | None:
        """Look up any member, healthy or not."""
        idx = self._index.get(member_id)
        return self._members[idx] if idx is not None else None

    def health_of(self, member_id: str) -> MemberHealth | None:
        idx = self._index.get(member_id)
        if idx is None:
            return None
        with self._lock.read():
            h = self._health[idx]
            return MemberHealth(status=h.status, last_checked=h.last_checked)

    def all_with_health(self) -> list[tuple[Member, MemberHealth]]:
        """Every member with a copy of its health, in ring order."""
        with self._lock.read():
            return [
                (
                    self._members[i],
                    MemberHealth(self._health[i].status, self._health[i].last_checked),
                )
                for i in self._mapping
            ]

    def iter_healthy(self) -> list[Member]:
        """Healthy members in ring order."""
        with self._lock.read():
            return [self._members[i] for i in self._healthy_indices()]

    def members(self) -> list[Member]:
        """Members in load order."""
        return list(self._members)

    def neighbors(self, member_id: str) -> tuple[Member, Member]:
        """Return ``(prev, next)`` healthy neighbours of ``member_id``.

        A healthy member gets its neighbours in the healthy-only ring. An
        unhealthy member keeps its slot in the full ring and is given the
        nearest healthy member on each side, so it can still see where it
        would link to.

        Raises ``MemberNotFoundError`` for unknown ids and
        ``NoHealthyMembersError`` when nobody is healthy.
        """
        member_idx = self._index.get(member_id)
        if member_idx is None:
            raise MemberNotFoundError(member_id)

        with self._lock.read():
            healthy = self._healthy_indices()
            if not healthy:
                raise NoHealthyMembersError(member_id)

            if self._health[member_idx].status.is_healthy:
                pos = healthy.index(member_idx)
                prev_idx = healthy[(pos - 1) % len(healthy)]
                next_idx = healthy[(pos + 1) % len(healthy)]
            else:
                pos = self._mapping.index(member_idx)
                prev_idx = self._scan(pos, -1)
                next_idx = self._scan(pos, 1)

            return self._members[prev_idx], self._members[next_idx]

    def _healthy_indices(self) -> list[int]:
        return [i for i in self._mapping if self._health[i].status.is_healthy]

    def _scan(self, pos: int, step: int) -> int:
        """First healthy member index walking the full ring from ``pos``."""
        size = len(self._mapping)
        for offset in range(1, size + 1):
            idx = self._mapping[(pos + step * offset) % size]
            if self._health[idx].status.is_healthy:
                return idx
        raise NoHealthyMembersError()

    # ── Writes ──────────────────────────────────────────────────────────

    def set_health(self, member_id: str, status: HealthStatus) -> bool:
        """Record a scan result. Returns False for unknown ids."""
        idx = self._index.get(member_id)
        if idx is None:
            return False
        now = datetime.now(timezone.utc)
        with self._lock.write():
            previous = self._health[idx].status
            self._health[idx] = MemberHealth(status=status, last_checked=now)

        if previous.is_healthy and not status.is_healthy and previous != HealthStatus.UNKNOWN:
            logger.warning("Member %s became unhealthy: %s", member_id, status.description)
        elif not previous.is_healthy and status.is_healthy:
            logger.info("Member %s recovered: %s", member_id, status.description)
        return True

    def next_member_to_check(self) -> Member | None:
        """Return the member under the check cursor and advance it."""
        if not self._members:
            return None
        with self._lock.write():
            member = self._members[self._check_index]
            self._check_index = (self._check_index + 1) % len(self._members)
        return member

    # ── Diagnostics ─────────────────────────────────────────────────────

    def counts(self) -> dict[str, int]:
        with self._lock.read():
            healthy = sum(1 for h in self._health if h.status.is_healthy)
        return {"total": len(self._members), "healthy": healthy}
