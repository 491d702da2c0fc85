"""Scored candidate selection with random tie-breaking.

Both "best staff for a fixed shift" and "best (staff, shift) pair across
the pool" reduce to the same routine: score every candidate, keep the
maximal-score set, and let a random source pick one of them.
"""

import random
from typing import Callable, Iterable, Optional, Sequence, TypeVar

T = TypeVar("T")

# Picks one element from a non-empty sequence.
RandomSource = Callable[[Sequence[T]], T]


def default_random_source(seed: Optional[int] = None) -> RandomSource:
    """Uniform random choice, optionally seeded for reproducible runs."""
    return random.Random(seed).choice


def best_candidates(
    candidates: Iterable[T],
    score: Callable[[T], Optional[float]],
) -> list[T]:
    """Return every candidate sharing the maximal score.

    Candidates scored as ``None`` are skipped. Input order is preserved
    among the winners.
    """
    best_score: Optional[float] = None
    bests: list[T] = []
    for candidate in candidates:
        value = score(candidate)
        if value is None:
            continue
        if best_score is None or value > best_score:
            best_score = value
            bests = [candidate]
        elif value == best_score:
            bests.append(candidate)
    return bests


def pick_best(
    candidates: Iterable[T],
    score: Callable[[T], Optional[float]],
    choose: RandomSource,
) -> Optional[T]:
    """Pick one maximal-score candidate, or None if there are none."""
    bests = best_candidates(candidates, score)
    if not bests:
        return None
    return choose(bests)
