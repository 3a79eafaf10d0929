# src/wormhole_scheduler/core/gcd.py

from __future__ import annotations

"""
Greatest common divisor with a per-owner memo.

The memo is keyed by the unordered pair, so gcd(a, b) and gcd(b, a) share one
cache entry. The cache only grows; owners that want a fresh one create a new
GCDMemo.
"""

from collections.abc import Iterable, MutableMapping


def gcd(x: int, y: int) -> int:
    while y != 0:
        x, y = y, x % y
    return abs(x)


class GCDMemo:
    """
    Callable memoizing gcd.

    An explicit cache mapping can be injected (tests use that to look inside);
    otherwise each instance starts with its own empty dict.
    """

    def __init__(self, cache: MutableMapping[frozenset[int], int] | None = None) -> None:
        self.cache: MutableMapping[frozenset[int], int] = {} if cache is None else cache
        self.hits = 0
        self.misses = 0

    def __call__(self, x: int, y: int) -> int:
        key = frozenset((x, y))
        cached = self.cache.get(key)
        if cached is not None:
            self.hits += 1
            return cached

        self.misses += 1
        value = gcd(x, y)
        self.cache[key] = value
        return value

    def reduce(self, values: Iterable[int]) -> int:
        """Fold gcd over values, seeded with the first one."""
        it = iter(values)
        try:
            acc = next(it)
        except StopIteration:
            raise ValueError("reduce() of empty sequence") from None
        for v in it:
            acc = self(v, acc)
        return acc

    def __len__(self) -> int:
        return len(self.cache)
