"""Randomized reviewer selection.

Reviewers are drawn from a candidate pool without positional bias. The
randomness source is passed in explicitly: production uses the operating
system's entropy pool, tests pass a seeded ``random.Random``.
"""
import logging
import os
import random
from typing import Protocol, Sequence, TypeVar

logger = logging.getLogger("reviewer-core.selection")

T = TypeVar("T")


class RandomSource(Protocol):
    """Anything that can draw a uniform integer in ``[0, n)``.

    Both ``random.Random`` and ``random.SystemRandom`` satisfy it.
    """

    def randrange(self, stop: int) -> int: ...


def new_random_source() -> RandomSource:
    """
    Create the production randomness source.

    Returns a ``random.SystemRandom`` backed by ``os.urandom``. If the
    platform has no entropy source, falls back to a fixed-seed generator
    and logs that selection is degraded.
    """
    try:
        os.urandom(8)
    except NotImplementedError:
        logger.warning(
            "No OS randomness source available; reviewer selection falls back "
            "to a fixed seed and is predictable (degraded)"
        )
        return random.Random(1)
    return random.SystemRandom()


def choose_reviewers(candidates: Sequence[T], k: int, rng: RandomSource) -> list[T]:
    """
    Pick up to ``k`` distinct candidates uniformly at random.

    Shuffles a working copy of the pool with Fisher-Yates (walking from the
    last index down, swapping ``i`` with a uniform ``j <= i``) and keeps the
    first ``k`` entries.

    Args:
        candidates: Candidate pool (not modified)
        k: Maximum number of candidates to return
        rng: Randomness source

    Returns:
        ``min(len(candidates), k)`` candidates; empty when the pool is empty
        or ``k <= 0``
    """
    if not candidates or k <= 0:
        return []

    pool = list(candidates)
    for i in range(len(pool) - 1, 0, -1):
        j = rng.randrange(i + 1)
        pool[i], pool[j] = pool[j], pool[i]

    return pool[:k]


def choose_one(candidates: Sequence[T], rng: RandomSource) -> T:
    """Pick a single candidate with one uniform draw. The pool must not be empty."""
    if not candidates:
        raise ValueError("cannot choose from an empty candidate pool")
    return candidates[rng.randrange(len(candidates))]
