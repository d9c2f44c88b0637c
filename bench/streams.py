"""
Id streams for exercising a WatermarkSet.

- in_order: 0..n-1
- interleaved: evens first, then odds (every bucket stays open until the second pass)
- near_monotonic: 0..n-1 with each id swapped at most `spread` positions away,
  the "mostly in order" shape message ids have on a real bus
"""

from typing import List
import random


def in_order(n: int, base: int = 0) -> List[int]:
    return list(range(base, base + n))


def interleaved(n: int, base: int = 0) -> List[int]:
    return list(range(base, base + n, 2)) + list(range(base + 1, base + n, 2))


def near_monotonic(n: int, spread: int = 100, seed: int = 2026) -> List[int]:
    items = list(range(n))
    rng = random.Random(seed)
    for i in range(n):
        # already swapped forward, leave it
        if items[i] != i:
            continue
        j = min(max(i + rng.randint(-spread, spread), 0), n - 1)
        items[i], items[j] = items[j], items[i]
    return items
