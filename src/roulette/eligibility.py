"""Eligible-pool computation and uniform draws without replacement."""

from __future__ import annotations

import random
from typing import Iterable, Sequence


def eligible(catalog_ids: Iterable[str], used_ids: Iterable[str]) -> list[str]:
    """Catalog ids not in `used_ids`, in catalog order and without duplicates.

    An empty result means every catalog entry is used; callers must check.
    """
    excluded = set(used_ids)
    pool: list[str] = []
    for country_id in catalog_ids:
        if country_id in excluded:
            continue
        excluded.add(country_id)
        pool.append(country_id)
    return pool


def pick_without_replacement(
    pool: Sequence[str],
    k: int,
    rng: random.Random | None = None,
) -> list[str]:
    """Draw up to `k` distinct elements uniformly at random from `pool`.

    `pool` itself is never mutated. When `k` exceeds the pool size every
    element is returned, in random order.
    """
    if k < 0:
        raise ValueError("k must be >= 0")
    source = rng if rng is not None else random
    remaining = list(pool)
    picks: list[str] = []
    for _ in range(min(k, len(remaining))):
        idx = source.randrange(len(remaining))
        picks.append(remaining.pop(idx))
    return picks
