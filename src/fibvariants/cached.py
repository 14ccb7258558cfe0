"""Memoized Fibonacci numbers backed by a fixed-capacity table.

The table holds one float per index. Unknown entries hold NaN, known entries
hold the Fibonacci number. Entries are filled on demand and never cleared,
so the known entries always form a prefix of the table.

A process-wide cache is created at import time and used by `cached_fib`
unless a cache is passed in explicitly.
"""

from __future__ import annotations

import logging
import math
import threading

from fibvariants.errors import CapacityExceededError

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 2000


class FibonacciCache:
    """Fixed-size memo table for Fibonacci numbers.

    Attributes:
        table: One slot per index, NaN until computed.
        hits: Lookups answered directly from the table.
        fills: Slots computed so far.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 2:
            msg = f"Cache capacity must be at least 2, got {capacity}"
            raise ValueError(msg)

        self.table: list[float] = [math.nan] * capacity
        self.table[0] = 0.0
        self.table[1] = 1.0
        self.hits = 0
        self.fills = 0
        self._lock = threading.Lock()
        logger.debug("Created Fibonacci cache with capacity %d", capacity)

    @property
    def capacity(self) -> int:
        return len(self.table)

    @property
    def known_count(self) -> int:
        """Number of slots holding a computed value."""
        return sum(1 for value in self.table if not math.isnan(value))

    def __len__(self) -> int:
        return len(self.table)

    def __contains__(self, x: object) -> bool:
        return isinstance(x, int) and self.is_known(x)

    def __repr__(self) -> str:
        return (
            f"FibonacciCache(capacity={self.capacity}, "
            f"known={self.known_count}, hits={self.hits}, fills={self.fills})"
        )

    def is_known(self, x: int) -> bool:
        """Return True if index x is in range and already computed."""
        if x < 0 or x >= len(self.table):
            return False
        return not math.isnan(self.table[x])

    def lookup(self, x: int) -> float:
        """Return the x-th Fibonacci number, computing it if needed.

        Negative indices yield NaN. Every slot below x that was still
        unknown is filled as a side effect.

        Raises:
            CapacityExceededError: If x is not below the cache capacity.
        """
        if x < 0:
            return math.nan
        if x >= len(self.table):
            raise CapacityExceededError(x, len(self.table))
        if x < 2:
            return float(x)

        with self._lock:
            value = self.table[x]
            if not math.isnan(value):
                self.hits += 1
                return value
            self._fill_through(x)
            return self.table[x]

    def _fill_through(self, x: int) -> None:
        # Walk down to the highest known slot, then fill upwards.
        table = self.table
        start = x
        while math.isnan(table[start - 1]):
            start -= 1

        for i in range(start, x + 1):
            table[i] = table[i - 1] + table[i - 2]
        self.fills += x + 1 - start
        logger.debug("Filled Fibonacci cache slots %d..%d", start, x)


_default_cache = FibonacciCache(DEFAULT_CAPACITY)


def default_cache() -> FibonacciCache:
    """Return the process-wide cache used by `cached_fib`."""
    return _default_cache


def reset_default_cache(capacity: int = DEFAULT_CAPACITY) -> FibonacciCache:
    """Replace the process-wide cache with an empty one.

    This is the only way to change the default capacity.
    """
    global _default_cache

    fresh = FibonacciCache(capacity)
    logger.warning(
        "Resetting default Fibonacci cache (capacity %d -> %d)",
        _default_cache.capacity,
        capacity,
    )
    _default_cache = fresh
    return _default_cache


def cached_fib(x: int, cache: FibonacciCache | None = None) -> float:
    """Compute the x-th Fibonacci number through a memo table.

    Args:
        x: Index into the sequence.
        cache: Cache to use. Defaults to the process-wide cache.

    Returns:
        The Fibonacci number as a float, or NaN for negative x.

    Raises:
        CapacityExceededError: If x does not fit in the cache.
    """
    if cache is None:
        cache = _default_cache
    return cache.lookup(x)
