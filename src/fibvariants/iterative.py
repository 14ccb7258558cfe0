"""Fibonacci numbers by accumulation."""

from __future__ import annotations

import math


def fib_iterative(x: int) -> float:
    """Compute the x-th Fibonacci number with two rolling values.

    Returns NaN for negative x instead of raising.
    """
    if x < 0:
        return math.nan
    if x < 2:
        return float(x)

    first = 0.0
    second = 1.0
    third = 0.0
    for _ in range(x):
        third = first + second
        first = second
        second = third
    return first
