"""Unbiased winner selection."""

from __future__ import annotations

import random
from typing import Optional, Sequence, TypeVar

from ..exceptions import EmptyPoolError, OverselectionError

T = TypeVar("T")

_system_random = random.SystemRandom()


def select_winners(
    pool: Sequence[T],
    k: int,
    rng: Optional[random.Random] = None,
) -> list[T]:
    """Pick ``k`` distinct elements of ``pool`` uniformly at random.

    Runs the first ``k`` steps of a Fisher-Yates shuffle on a copy of
    ``pool``, so every ``k``-permutation of the pool is equally likely.

    Parameters
    ----------
    pool : Sequence[T]
        Eligible candidates. The sequence itself is left untouched.
    k : int
        Number of elements to select.
    rng : Optional[random.Random], default: None
        Source of randomness. Defaults to :class:`random.SystemRandom`;
        tests pass a seeded :class:`random.Random` for reproducibility.

    Returns
    -------
    list[T]
        The selection, in draw order.

    Raises
    ------
    ValueError
        If ``k`` is smaller than one.
    EmptyPoolError
        If ``pool`` is empty.
    OverselectionError
        If ``k`` exceeds the size of ``pool``.
    """
    if k < 1:
        raise ValueError("Number of winners must be at least 1")
    n = len(pool)
    if n == 0:
        raise EmptyPoolError()
    if k > n:
        raise OverselectionError(k, n)

    rng = rng or _system_random
    items = list(pool)
    for i in range(k):
        j = rng.randint(i, n - 1)
        items[i], items[j] = items[j], items[i]
    return items[:k]


__all__ = ["select_winners"]
