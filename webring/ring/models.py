"""Member and health models shared by the store, scanner and API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class HealthStatus(str, Enum):
    """How (or whether) a member site is wired into the ring.

    Healthy variants are listed in descending detection priority.
    """

    UNKNOWN = "unknown"
    HEALTHY_RING_JS = "healthy_ring_js"
    HEALTHY_API_JS = "healthy_api_js"
    HEALTHY_REDIRECT_LINKS = "healthy_redirect_links"
    HEALTHY_STATIC = "healthy_static"
    HEALTHY_JS_OTHER = "healthy_js_other"
    UNHEALTHY_DOWN = "unhealthy_down"
    UNHEALTHY_MISSING = "unhealthy_missing"

    @property
    def is_healthy(self) -> bool:
        # Never-scanned members stay in the ring until their first check.
        return self not in (HealthStatus.UNHEALTHY_DOWN, HealthStatus.UNHEALTHY_MISSING)

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    HealthStatus.UNKNOWN: "Not yet scanned",
    HealthStatus.HEALTHY_RING_JS: "Uses ring.js script",
    HealthStatus.HEALTHY_API_JS: "Uses JavaScript API fetch",
    HealthStatus.HEALTHY_REDIRECT_LINKS: "Uses prev/next redirect links",
    HealthStatus.HEALTHY_STATIC: "Server-side or static HTML integration",
    HealthStatus.HEALTHY_JS_OTHER: "Found in linked JavaScript",
    HealthStatus.UNHEALTHY_DOWN: "Site is down or unreachable",
    HealthStatus.UNHEALTHY_MISSING: "Site is up but no ring integration found",
}


@dataclass(frozen=True)
class Member:
    """A registered ring site."""

    id: str
    name: str
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "url": self.url}


@dataclass
class MemberHealth:
    """Latest scan outcome for one member."""

    status: HealthStatus = HealthStatus.UNKNOWN
    last_checked: datetime | None = None
