"""fibvariants: recursive, iterative and memoized Fibonacci numbers."""

from __future__ import annotations

from fibvariants.cached import (
    DEFAULT_CAPACITY,
    FibonacciCache,
    cached_fib,
    default_cache,
    reset_default_cache,
)
from fibvariants.errors import CapacityExceededError, FibonacciError, InvalidInputError
from fibvariants.iterative import fib_iterative
from fibvariants.recursive import fib_recursive
from fibvariants.variants import (
    VARIANTS,
    Variant,
    evaluate,
    find_disagreements,
    get_variant,
)

__all__ = [
    "DEFAULT_CAPACITY",
    "VARIANTS",
    "CapacityExceededError",
    "FibonacciCache",
    "FibonacciError",
    "InvalidInputError",
    "Variant",
    "cached_fib",
    "default_cache",
    "evaluate",
    "fib_iterative",
    "fib_recursive",
    "find_disagreements",
    "get_variant",
    "reset_default_cache",
]
