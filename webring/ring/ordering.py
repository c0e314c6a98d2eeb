"""Deterministic ring ordering.

The ring is a permutation of member indices seeded from the current
calendar epoch, so every process started within the same epoch agrees on
the order without persisting anything.
"""

from __future__ import annotations

import random
import time

WEEK_SECONDS = 60 * 60 * 24 * 7


def epoch_seed(now: float | None = None, epoch_seconds: int = WEEK_SECONDS) -> int:
    """Number of whole epochs since the Unix epoch."""
    if now is None:
        now = time.time()
    return max(int(now), 0) // epoch_seconds


def shuffled_mapping(size: int, seed: int) -> list[int]:
    """Uniform permutation of ``range(size)`` for ``seed``.

    ``random.Random.shuffle`` is Fisher-Yates and stable for integer seeds.
    """
    mapping = list(range(size))
    random.Random(seed).shuffle(mapping)
    return mapping
