"""Health summary — aggregates member health for the status endpoint."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..ring.models import HealthStatus
from ..ring.store import RingStore


def format_since(seconds: float | None) -> str:
    """Human-readable age of a check, bucketed to s / m / h."""
    if seconds is None:
        return "never"
    seconds = max(int(seconds), 0)
    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    return f"{seconds // 3600}h ago"


def build_summary(store: RingStore, now: datetime | None = None) -> dict[str, Any]:
    """Counts plus per-status member groups, in ring order."""
    now = now or datetime.now(timezone.utc)
    snapshot = store.all_with_health()

    members = []
    by_status: dict[str, dict[str, Any]] = {}
    for member, health in snapshot:
        age = (now - health.last_checked).total_seconds() if health.last_checked else None
        entry = {
            **member.to_dict(),
            "status": health.status.value,
            "description": health.status.description,
            "healthy": health.status.is_healthy,
            "last_checked": health.last_checked.isoformat() if health.last_checked else None,
            "last_checked_ago": format_since(age),
        }
        members.append(entry)
        group = by_status.setdefault(
            health.status.value,
            {"description": health.status.description, "count": 0, "members": []},
        )
        group["count"] += 1
        group["members"].append(entry)

    # Keep groups in status priority order.
    ordered = {s.value: by_status[s.value] for s in HealthStatus if s.value in by_status}
    healthy = sum(1 for m in members if m["healthy"])
    return {
        "total": len(members),
        "healthy": healthy,
        "unhealthy": len(members) - healthy,
        "by_status": ordered,
        "members": members,
    }
