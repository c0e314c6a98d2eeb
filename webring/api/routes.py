"""Public ring endpoints.

Endpoints:
  GET /                 — landing page listing the ring
  GET /health           — liveness + deployed commit
  GET /all              — healthy members in ring order
  GET /status           — health summary grouped by status
  GET /ring.js          — embeddable widget script
  GET /styles.css       — landing page stylesheet
  GET /{id}             — member with prev/next neighbours
  GET /{id}/prev        — redirect to previous member
  GET /{id}/next        — redirect to next member
"""

from __future__ import annotations

import html
import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse, Response

from ..config import settings
from ..health.summary import build_summary
from ..ring.models import Member
from ..ring.store import MemberNotFoundError, NoHealthyMembersError, RingStore
from .models import MemberDetail, MemberOut

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent.parent / "static"

router = APIRouter()


def _store(request: Request) -> RingStore:
    return request.app.state.store


def _neighbors(store: RingStore, member_id: str) -> tuple[Member, Member]:
    try:
        return store.neighbors(member_id)
    except MemberNotFoundError:
        raise HTTPException(status_code=404, detail="Member not found")
    except NoHealthyMembersError:
        raise HTTPException(status_code=503, detail="No neighbors available")


# ── Ring-wide endpoints ──────────────────────────────────────────────────────


@router.get("/", response_class=HTMLResponse)
def landing_page(request: Request) -> str:
    """Plain HTML directory of the ring."""
    members = _store(request).iter_healthy()
    items = "\n".join(
        f'      <li><a href="{html.escape(m.url)}">{html.escape(m.name)}</a></li>'
        for m in members
    )
    name = html.escape(settings.ring_name)
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n"
        f"  <meta charset=\"utf-8\">\n  <title>{name}</title>\n"
        "  <link rel=\"stylesheet\" href=\"/styles.css\">\n"
        "</head>\n<body>\n"
        f"  <h1>{name}</h1>\n"
        f"  <p>{len(members)} sites in the ring.</p>\n"
        f"  <ul>\n{items}\n  </ul>\n"
        "</body>\n</html>\n"
    )


@router.get("/health", response_class=PlainTextResponse)
def health() -> str:
    return f"OK\n{settings.commit}"


@router.get("/all", response_model=list[MemberOut])
def all_members(request: Request) -> list[MemberOut]:
    """Healthy members in current ring order."""
    return [MemberOut.from_member(m) for m in _store(request).iter_healthy()]


@router.get("/status")
def status(request: Request) -> dict[str, Any]:
    """Health counts and member lists grouped by status."""
    return build_summary(_store(request))


@router.get("/ring.js")
def ring_js() -> Response:
    script = (STATIC_DIR / "ring.js").read_text(encoding="utf-8")
    script = script.replace("__RING_DOMAIN__", settings.ring_domain)
    return Response(content=script, media_type="application/javascript")


@router.get("/styles.css")
def styles_css() -> Response:
    css = (STATIC_DIR / "styles.css").read_text(encoding="utf-8")
    return Response(content=css, media_type="text/css")


# ── Member endpoints ─────────────────────────────────────────────────────────


@router.get("/{member_id}", response_model=MemberDetail)
def one(member_id: str, request: Request) -> MemberDetail:
    """Member plus neighbours; neighbours are null when nobody is healthy."""
    store = _store(request)
    member = store.get(member_id)
    if member is None:
        raise HTTPException(status_code=404, detail="Member not found")

    try:
        prev, nxt = store.neighbors(member_id)
    except NoHealthyMembersError:
        return MemberDetail(prev=None, member=MemberOut.from_member(member), next=None)

    return MemberDetail(
        prev=MemberOut.from_member(prev),
        member=MemberOut.from_member(member),
        next=MemberOut.from_member(nxt),
    )


@router.get("/{member_id}/prev")
def prev(member_id: str, request: Request) -> RedirectResponse:
    target, _ = _neighbors(_store(request), member_id)
    return RedirectResponse(target.url, status_code=307)


@router.get("/{member_id}/next")
def next_(member_id: str, request: Request) -> RedirectResponse:
    _, target = _neighbors(_store(request), member_id)
    return RedirectResponse(target.url, status_code=307)
