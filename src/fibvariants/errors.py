"""Exceptions raised by fibvariants."""

from __future__ import annotations


class FibonacciError(Exception):
    """Base class for all fibvariants errors."""


class InvalidInputError(FibonacciError, ValueError):
    """The requested index is not a valid Fibonacci index.

    Attributes:
        index: The rejected index.
    """

    def __init__(self, index: int, msg: str | None = None) -> None:
        self.index = index
        if msg is None:
            msg = f"Invalid Fibonacci index: {index}"
        super().__init__(msg)


class CapacityExceededError(InvalidInputError, IndexError):
    """The requested index does not fit in the cache.

    Attributes:
        index: The rejected index.
        capacity: Capacity of the cache that rejected it.
    """

    def __init__(self, index: int, capacity: int) -> None:
        self.capacity = capacity
        msg = (
            f"x={index} too large for implementation: "
            f"cache capacity is {capacity} (largest index {capacity - 1})"
        )
        super().__init__(index, msg)
