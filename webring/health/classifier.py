"""Site health classifier — detects how a member links into the ring.

Fetches the member's page and, if needed, its linked scripts, then runs
an ordered list of text rules over them. The first rule that matches
decides the status:

  1. page references ring.js              → HEALTHY_RING_JS
  2. page references the ring API         → HEALTHY_REDIRECT_LINKS / HEALTHY_API_JS
  3. a linked script matches any of 1, 2,
     or mentions the ring name            → HEALTHY_RING_JS / … / HEALTHY_JS_OTHER
  4. page mentions the ring name          → HEALTHY_STATIC
  5. nothing                              → UNHEALTHY_MISSING

A page that cannot be fetched is UNHEALTHY_DOWN. Network problems never
escape this module.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import urljoin

import httpx

from ..ring.models import HealthStatus

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 15.0

_SCRIPT_SRC_RE = re.compile(
    r"""<script\b[^>]*?\ssrc\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>]+))""",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ClassifierPatterns:
    """Lower-cased search strings for one ring deployment."""

    domain: str = "umaring.mkr.cx"
    ring_name: str = "umaring"
    redirect_tokens: tuple[str, ...] = ("/prev", "/next")

    @property
    def ring_js(self) -> str:
        return f"{self.domain}/ring.js".lower()

    @property
    def api_base(self) -> str:
        return f"{self.domain}/".lower()

    @property
    def name(self) -> str:
        return self.ring_name.lower()


DEFAULT_PATTERNS = ClassifierPatterns()

# A rule inspects lower-cased text and returns a status or None.
Rule = Callable[[str, ClassifierPatterns], HealthStatus | None]


# ── Rules ────────────────────────────────────────────────────────────────────


def match_ring_js(text: str, p: ClassifierPatterns) -> HealthStatus | None:
    if p.ring_js in text:
        return HealthStatus.HEALTHY_RING_JS
    return None


def match_api(text: str, p: ClassifierPatterns) -> HealthStatus | None:
    pos = text.find(p.api_base)
    if pos < 0:
        return None
    after = text[pos + len(p.api_base):]
    if any(token in after for token in p.redirect_tokens):
        return HealthStatus.HEALTHY_REDIRECT_LINKS
    return HealthStatus.HEALTHY_API_JS


def match_name_in_script(text: str, p: ClassifierPatterns) -> HealthStatus | None:
    if p.name in text:
        return HealthStatus.HEALTHY_JS_OTHER
    return None


def match_name_in_page(text: str, p: ClassifierPatterns) -> HealthStatus | None:
    if p.name in text:
        return HealthStatus.HEALTHY_STATIC
    return None


PAGE_RULES: list[Rule] = [match_ring_js, match_api]
SCRIPT_RULES: list[Rule] = [match_ring_js, match_api, match_name_in_script]
PAGE_FALLBACK_RULES: list[Rule] = [match_name_in_page]


def apply_rules(
    text: str, rules: list[Rule], patterns: ClassifierPatterns = DEFAULT_PATTERNS,
) -> HealthStatus | None:
    """Run ``rules`` in order over ``text``; first match wins."""
    lowered = text.lower()
    for rule in rules:
        status = rule(lowered, patterns)
        if status is not None:
            return status
    return None


def classify_script(
    text: str, patterns: ClassifierPatterns = DEFAULT_PATTERNS,
) -> HealthStatus | None:
    return apply_rules(text, SCRIPT_RULES, patterns)


# ── Script discovery ─────────────────────────────────────────────────────────


def extract_script_urls(html: str, page_url: str) -> list[str]:
    """Absolute URLs of every ``<script src>`` on the page, deduplicated."""
    urls: list[str] = []
    for match in _SCRIPT_SRC_RE.finditer(html):
        src = next((g for g in match.groups() if g is not None), "").strip()
        if not src:
            continue
        try:
            resolved = urljoin(page_url, src)
        except ValueError:
            logger.debug("Skipping unresolvable script src %r", src)
            continue
        if not resolved.startswith(("http://", "https://")):
            continue
        if resolved not in urls:
            urls.append(resolved)
    return urls


# ── Classification ───────────────────────────────────────────────────────────


def _fetch(client: httpx.Client, url: str) -> httpx.Response | None:
    try:
        resp = client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.debug("Fetch failed for %s: %s: %s", url, type(e).__name__, e)
        return None
    if not resp.is_success:
        logger.debug("Fetch %s returned %d", url, resp.status_code)
        return None
    return resp


def classify_page(
    client: httpx.Client,
    html: str,
    page_url: str,
    patterns: ClassifierPatterns = DEFAULT_PATTERNS,
) -> HealthStatus:
    """Classify an already-fetched page, fetching its scripts through ``client``."""
    status = apply_rules(html, PAGE_RULES, patterns)
    if status is not None:
        return status

    for script_url in extract_script_urls(html, page_url):
        resp = _fetch(client, script_url)
        if resp is None:
            continue
        status = classify_script(resp.text, patterns)
        if status is not None:
            logger.debug("Ring reference found in %s", script_url)
            return status

    status = apply_rules(html, PAGE_FALLBACK_RULES, patterns)
    if status is not None:
        return status

    return HealthStatus.UNHEALTHY_MISSING


def classify_site(
    url: str,
    patterns: ClassifierPatterns = DEFAULT_PATTERNS,
    timeout: float = REQUEST_TIMEOUT,
    transport: httpx.BaseTransport | None = None,
) -> HealthStatus:
    """Fetch ``url`` and classify its ring integration. Never raises."""
    with httpx.Client(
        timeout=timeout, follow_redirects=True, transport=transport,
    ) as client:
        resp = _fetch(client, url)
        if resp is None:
            return HealthStatus.UNHEALTHY_DOWN
        status = classify_page(client, resp.text, str(resp.url), patterns)

    logger.debug("Classified %s: %s", url, status.value)
    return status
