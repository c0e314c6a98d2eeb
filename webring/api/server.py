"""FastAPI server for the webring directory."""

from __future__ import annotations

import functools
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import settings
from ..health.classifier import ClassifierPatterns, classify_site
from ..health.scheduler import HealthScheduler
from ..ring.registry import load_members
from ..ring.reshuffle import RingReshuffler
from ..ring.store import RingStore
from .routes import router

logger = logging.getLogger(__name__)


def build_store(members_file: str | Path | None = None) -> RingStore:
    """Load members and build the shared store. Raises MemberConfigError."""
    path = Path(members_file or settings.members_file)
    if not path.is_absolute():
        path = Path.cwd() / path
    return RingStore(load_members(path), epoch_seconds=settings.epoch_seconds)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the ring and start background scanning + reshuffling."""
    # A bad member list must stop startup, so no try/except here.
    store = build_store()
    app.state.store = store

    patterns = ClassifierPatterns(domain=settings.ring_domain, ring_name=settings.ring_name)
    scheduler = HealthScheduler(
        store,
        check=functools.partial(
            classify_site, patterns=patterns, timeout=settings.request_timeout,
        ),
        interval=settings.check_interval,
    )
    app.state.health_scheduler = scheduler
    await scheduler.start()

    reshuffler = RingReshuffler(store, interval=settings.reshuffle_interval)
    app.state.reshuffler = reshuffler
    await reshuffler.start()

    yield

    await reshuffler.stop()
    await scheduler.stop()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Webring",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    return app


app = create_app()
