"""Readers-writer lock guarding the ring store.

Request handlers run in the server's thread pool while the scanner and
reshuffler run on the event loop, so this is a threading primitive.
Writers are preferred: once a writer is waiting, new readers queue
behind it so health commits are not starved by steady read traffic.

Health commits, cursor advances and reshuffles take the write side from
the event loop thread itself, so a writer waiting on readers blocks the
loop. Every hold is a few dictionary or list operations, which keeps
that wait short.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class ReadWriteLock:
    """Many concurrent readers or one exclusive writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()
