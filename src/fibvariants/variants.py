"""Registry of the Fibonacci implementations.

Each variant is exposed under a short name so callers (the benchmark runner,
the agreement check) can pick implementations by name.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from fibvariants.cached import FibonacciCache, cached_fib
from fibvariants.iterative import fib_iterative
from fibvariants.recursive import fib_recursive


@dataclass(frozen=True)
class Variant:
    """A named Fibonacci implementation.

    Attributes:
        name: Registry key.
        func: The implementation. Stateful variants also accept a cache.
        description: One-line summary for reports.
        stateful: Whether func takes a `cache` argument.
    """

    name: str
    func: Callable[..., float]
    description: str
    stateful: bool = False

    def __call__(self, x: int, cache: FibonacciCache | None = None) -> float:
        if self.stateful:
            return self.func(x, cache)
        return self.func(x)


VARIANTS: dict[str, Variant] = {
    "recursive": Variant(
        name="recursive",
        func=fib_recursive,
        description="naive recursion, exponential time",
    ),
    "iterative": Variant(
        name="iterative",
        func=fib_iterative,
        description="two rolling values, linear time",
    ),
    "cached": Variant(
        name="cached",
        func=cached_fib,
        description="recursion memoized in a fixed-capacity table",
        stateful=True,
    ),
}


def get_variant(name: str) -> Variant:
    """Look up a variant by name.

    Raises:
        ValueError: If no variant has that name.
    """
    try:
        return VARIANTS[name]
    except KeyError:
        known = ", ".join(VARIANTS)
        msg = f"Unknown Fibonacci variant '{name}' (known: {known})"
        raise ValueError(msg) from None


def evaluate(name: str, x: int, cache: FibonacciCache | None = None) -> float:
    """Compute the x-th Fibonacci number with the named variant."""
    return get_variant(name)(x, cache)


def values_agree(values: Iterable[float]) -> bool:
    """Return True if all values denote the same number.

    NaN results agree with each other.
    """
    values = list(values)
    if not values:
        return True
    first = values[0]
    if math.isnan(first):
        return all(math.isnan(v) for v in values)
    return all(v == first for v in values)


def find_disagreements(
    upto: int,
    cache: FibonacciCache | None = None,
    variants: Iterable[str] | None = None,
) -> list[int]:
    """Find indices in [0, upto] where the variants give different results.

    Args:
        upto: Largest index to check (inclusive).
        cache: Cache for the cached variant. A fresh one sized to fit is
            used when omitted, so the default cache is left untouched.
        variants: Names of variants to compare. Defaults to all of them.

    Returns:
        Sorted list of indices with disagreeing results.
    """
    selected = [get_variant(name) for name in (variants or VARIANTS)]
    if cache is None:
        cache = FibonacciCache(max(upto + 1, 2))

    return [
        x
        for x in range(upto + 1)
        if not values_agree(variant(x, cache) for variant in selected)
    ]
