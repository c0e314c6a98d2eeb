"""Tests for the site health classifier."""

from __future__ import annotations

import httpx
import pytest

from webring.health.classifier import (
    ClassifierPatterns,
    classify_script,
    classify_site,
    extract_script_urls,
    match_api,
)
from webring.ring.models import HealthStatus

BASE = "https://alice.example.com"
SITE = f"{BASE}/"
RING_JS_TAG = '<script id="umaring_js" src="https://umaring.mkr.cx/ring.js?id=alice"></script>'


def page(body: str) -> str:
    return f"<html><head><title>Alice</title></head><body>{body}</body></html>"


# ── Page-level rules ─────────────────────────────────────────────────────────


class TestPageRules:
    def test_ring_js(self, transport) -> None:
        t = transport({SITE: page(RING_JS_TAG)})
        assert classify_site(SITE, transport=t) == HealthStatus.HEALTHY_RING_JS

    def test_ring_js_case_insensitive(self, transport) -> None:
        t = transport({SITE: page('<SCRIPT SRC="HTTPS://UMARING.MKR.CX/RING.JS"></SCRIPT>')})
        assert classify_site(SITE, transport=t) == HealthStatus.HEALTHY_RING_JS

    def test_ring_js_beats_api(self, transport) -> None:
        body = RING_JS_TAG + '<a href="https://umaring.mkr.cx/alice/next">next</a>'
        t = transport({SITE: page(body)})
        assert classify_site(SITE, transport=t) == HealthStatus.HEALTHY_RING_JS

    def test_api_fetch(self, transport) -> None:
        body = '<script>fetch("https://umaring.mkr.cx/alice").then(r => r.json())</script>'
        t = transport({SITE: page(body)})
        assert classify_site(SITE, transport=t) == HealthStatus.HEALTHY_API_JS

    def test_redirect_links(self, transport) -> None:
        body = (
            '<a href="https://umaring.mkr.cx/alice/prev">prev</a>'
            '<a href="https://umaring.mkr.cx/alice/next">next</a>'
        )
        t = transport({SITE: page(body)})
        assert classify_site(SITE, transport=t) == HealthStatus.HEALTHY_REDIRECT_LINKS

    def test_static_mention(self, transport) -> None:
        t = transport({SITE: page("<p>Member of the UMaRing webring</p>")})
        assert classify_site(SITE, transport=t) == HealthStatus.HEALTHY_STATIC

    def test_missing(self, transport) -> None:
        t = transport({SITE: page("<p>Just a blog</p>")})
        assert classify_site(SITE, transport=t) == HealthStatus.UNHEALTHY_MISSING


class TestApiRule:
    p = ClassifierPatterns()

    def test_redirect_token_must_follow_api_base(self) -> None:
        text = '<a href="/next">x</a> fetch("https://umaring.mkr.cx/alice")'
        assert match_api(text, self.p) == HealthStatus.HEALTHY_API_JS

    def test_redirect_token_anywhere_after(self) -> None:
        text = 'fetch("https://umaring.mkr.cx/alice"); link = base + "/prev";'
        assert match_api(text, self.p) == HealthStatus.HEALTHY_REDIRECT_LINKS

    def test_no_api_base(self) -> None:
        assert match_api("nothing here /next", self.p) is None


# ── Fetch failures ───────────────────────────────────────────────────────────


class TestFetchFailures:
    def test_connection_error(self, transport) -> None:
        assert classify_site(SITE, transport=transport({})) == HealthStatus.UNHEALTHY_DOWN

    @pytest.mark.parametrize("code", [404, 500, 503])
    def test_error_status(self, transport, code: int) -> None:
        t = transport({SITE: code})
        assert classify_site(SITE, transport=t) == HealthStatus.UNHEALTHY_DOWN

    def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        t = httpx.MockTransport(handler)
        assert classify_site(SITE, transport=t) == HealthStatus.UNHEALTHY_DOWN

    @pytest.mark.parametrize("url", ["not a url", "ftp://files.example.com/", "http://[broken"])
    def test_unusable_url(self, url: str) -> None:
        assert classify_site(url) == HealthStatus.UNHEALTHY_DOWN


# ── Linked scripts ───────────────────────────────────────────────────────────


class TestLinkedScripts:
    def test_script_with_ring_js(self, transport) -> None:
        t = transport({
            SITE: page('<script src="/js/site.js"></script>'),
            f"{BASE}/js/site.js": 'loadScript("https://umaring.mkr.cx/ring.js")',
        })
        assert classify_site(SITE, transport=t) == HealthStatus.HEALTHY_RING_JS

    def test_script_with_api_fetch(self, transport) -> None:
        t = transport({
            SITE: page('<script src="app.js"></script>'),
            f"{BASE}/app.js": 'fetch("https://umaring.mkr.cx/" + id)',
        })
        assert classify_site(SITE, transport=t) == HealthStatus.HEALTHY_API_JS

    def test_script_with_redirects(self, transport) -> None:
        t = transport({
            SITE: page('<script src="app.js"></script>'),
            f"{BASE}/app.js": 'const base = "https://umaring.mkr.cx/alice"; go(base + "/next");',
        })
        assert classify_site(SITE, transport=t) == HealthStatus.HEALTHY_REDIRECT_LINKS

    def test_script_generic_mention(self, transport) -> None:
        t = transport({
            SITE: page('<script src="//cdn.example.net/widget.js"></script>'),
            "https://cdn.example.net/widget.js": "// umaring widget",
        })
        assert classify_site(SITE, transport=t) == HealthStatus.HEALTHY_JS_OTHER

    def test_script_beats_static_mention(self, transport) -> None:
        t = transport({
            SITE: page('<p>umaring</p><script src="/w.js"></script>'),
            f"{BASE}/w.js": "umaring",
        })
        assert classify_site(SITE, transport=t) == HealthStatus.HEALTHY_JS_OTHER

    def test_failed_script_is_skipped(self, transport) -> None:
        t = transport({
            SITE: page(
                '<script src="/broken.js"></script>'
                '<script src="/gone.js"></script>'
                '<script src="/ok.js"></script>'
            ),
            f"{BASE}/broken.js": 500,
            f"{BASE}/ok.js": 'fetch("https://umaring.mkr.cx/alice")',
        })
        assert classify_site(SITE, transport=t) == HealthStatus.HEALTHY_API_JS

    def test_scripts_without_evidence_fall_through(self, transport) -> None:
        t = transport({
            SITE: page('<script src="/a.js"></script>'),
            f"{BASE}/a.js": "console.log('hi')",
        })
        assert classify_site(SITE, transport=t) == HealthStatus.UNHEALTHY_MISSING

    def test_unresolvable_script_src_is_skipped(self, transport) -> None:
        t = transport({SITE: page('<p>member of umaring</p><script src="//[oops/x.js"></script>')})
        assert classify_site(SITE, transport=t) == HealthStatus.HEALTHY_STATIC

    def test_first_matching_script_wins(self, transport) -> None:
        t = transport({
            SITE: page('<script src="/one.js"></script><script src="/two.js"></script>'),
            f"{BASE}/one.js": "umaring",
            f"{BASE}/two.js": "https://umaring.mkr.cx/ring.js",
        })
        assert classify_site(SITE, transport=t) == HealthStatus.HEALTHY_JS_OTHER

    def test_classify_script_none(self) -> None:
        assert classify_script("var x = 1;") is None


# ── URL extraction ───────────────────────────────────────────────────────────


class TestExtractScriptUrls:
    def test_resolution(self) -> None:
        html = """
            <script src="https://cdn.x.com/a.js"></script>
            <script src="//cdn.y.com/b.js"></script>
            <script type="module" src='/root.js'></script>
            <SCRIPT SRC="rel.js"></SCRIPT>
            <script defer src=/bare.js></script>
            <script src="/root.js"></script>
        """
        urls = extract_script_urls(html, "https://alice.example.com/blog/index.html")
        assert urls == [
            "https://cdn.x.com/a.js",
            "https://cdn.y.com/b.js",
            "https://alice.example.com/root.js",
            "https://alice.example.com/blog/rel.js",
            "https://alice.example.com/bare.js",
        ]

    def test_protocol_relative_follows_page_scheme(self) -> None:
        assert extract_script_urls('<script src="//c.dev/x.js">', "http://a.dev/") == ["http://c.dev/x.js"]

    def test_ignores_inline_and_data_src(self) -> None:
        html = '<script>var a = 1;</script><script data-src="/lazy.js"></script><script src=""></script>'
        assert extract_script_urls(html, SITE) == []

    def test_skips_unresolvable_src(self) -> None:
        html = '<script src="//[oops/x.js"></script><script src="/ok.js"></script>'
        assert extract_script_urls(html, SITE) == [f"{BASE}/ok.js"]

    def test_ignores_non_http(self) -> None:
        assert extract_script_urls('<script src="data:text/javascript,1"></script>', SITE) == []


# ── Custom deployment ────────────────────────────────────────────────────────


class TestCustomPatterns:
    def test_other_ring(self, transport) -> None:
        p = ClassifierPatterns(domain="ring.example.org", ring_name="exring")
        t = transport({SITE: page('<script src="https://ring.example.org/ring.js"></script>')})
        assert classify_site(SITE, patterns=p, transport=t) == HealthStatus.HEALTHY_RING_JS

        t = transport({SITE: page(RING_JS_TAG)})
        assert classify_site(SITE, patterns=p, transport=t) == HealthStatus.UNHEALTHY_MISSING
