"""Fibonacci numbers straight from the textbook recurrence."""

from __future__ import annotations

from fibvariants.errors import InvalidInputError


def fib_recursive(x: int) -> int:
    """Compute the x-th Fibonacci number by naive recursion.

    Runs in exponential time; only useful as a baseline.

    Raises:
        InvalidInputError: If x is negative.
    """
    if x < 0:
        raise InvalidInputError(x)
    return _fib(x)


def _fib(x: int) -> int:
    if x == 0:
        return 0
    if x == 1:
        return 1
    return _fib(x - 1) + _fib(x - 2)
