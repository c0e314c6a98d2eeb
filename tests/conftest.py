"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from webring.ring.models import Member
from webring.ring.store import RingStore


@pytest.fixture
def members() -> list[Member]:
    return [
        Member(id="a", name="Alice", url="https://a.example.com"),
        Member(id="b", name="Bob", url="https://b.example.com"),
        Member(id="c", name="Carol", url="https://c.example.com"),
    ]


@pytest.fixture
def store(members: list[Member]) -> RingStore:
    return RingStore(members)


def set_order(store: RingStore, ids: list[str]) -> None:
    """Pin the ring order to ``ids`` instead of the epoch shuffle."""
    index = {m.id: i for i, m in enumerate(store.members())}
    store._mapping = [index[i] for i in ids]


@pytest.fixture
def order() -> Callable[[RingStore, list[str]], None]:
    return set_order


def site_transport(pages: dict[str, str | int]) -> httpx.MockTransport:
    """Transport serving ``pages``: body text, or an int status code.

    Unknown URLs raise ConnectError.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        page = pages.get(str(request.url))
        if page is None:
            raise httpx.ConnectError("connection refused", request=request)
        if isinstance(page, int):
            return httpx.Response(page, text="error")
        return httpx.Response(200, text=page)

    return httpx.MockTransport(handler)


@pytest.fixture
def transport() -> Callable[[dict[str, str | int]], httpx.MockTransport]:
    return site_transport
