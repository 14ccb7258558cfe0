"""Unit tests for fibvariants.cached."""

from __future__ import annotations

import logging
import math
import threading

import pytest

from fibvariants import CapacityExceededError, InvalidInputError
from fibvariants.cached import (
    DEFAULT_CAPACITY,
    FibonacciCache,
    cached_fib,
    default_cache,
    reset_default_cache,
)


class TestFibonacciCacheConstruction:
    """Tests for FibonacciCache construction."""

    def test_seeded_base_cases(self) -> None:
        """Test that indices 0 and 1 are known from the start."""
        cache = FibonacciCache(10)
        assert cache.table[0] == 0.0
        assert cache.table[1] == 1.0
        assert all(math.isnan(v) for v in cache.table[2:])
        assert cache.known_count == 2

    def test_capacity(self) -> None:
        """Test that the table has exactly the requested size."""
        cache = FibonacciCache(25)
        assert cache.capacity == 25
        assert len(cache) == 25

    def test_default_capacity(self) -> None:
        """Test the default capacity."""
        assert FibonacciCache().capacity == DEFAULT_CAPACITY == 2000

    def test_capacity_too_small(self) -> None:
        """Test that a cache must hold at least the two base cases."""
        with pytest.raises(ValueError):
            FibonacciCache(1)


class TestLookup:
    """Tests for FibonacciCache.lookup."""

    @pytest.mark.parametrize(
        ("x", "expected"), [(0, 0), (1, 1), (2, 1), (10, 55), (20, 6765)]
    )
    def test_known_values(self, x: int, expected: int) -> None:
        """Test against known Fibonacci numbers."""
        assert FibonacciCache(50).lookup(x) == expected

    def test_negative_is_nan(self) -> None:
        """Test that negative input yields NaN and leaves the cache alone."""
        cache = FibonacciCache(10)
        assert math.isnan(cache.lookup(-1))
        assert cache.known_count == 2
        assert cache.fills == 0

    def test_capacity_boundary(self) -> None:
        """Test that capacity - 1 works and capacity fails."""
        cache = FibonacciCache(100)
        assert cache.lookup(99) == pytest.approx(218922995834555169026)
        with pytest.raises(CapacityExceededError) as excinfo:
            cache.lookup(100)
        assert excinfo.value.index == 100
        assert excinfo.value.capacity == 100

    def test_capacity_error_leaves_cache_untouched(self) -> None:
        """Test that an oversized index performs no computation."""
        cache = FibonacciCache(10)
        with pytest.raises(CapacityExceededError):
            cache.lookup(10)
        assert cache.known_count == 2
        assert cache.fills == 0

    def test_capacity_error_hierarchy(self) -> None:
        """Test that the capacity error is also an invalid-input error."""
        with pytest.raises(InvalidInputError):
            FibonacciCache(3).lookup(3)
        with pytest.raises(IndexError):
            FibonacciCache(3).lookup(3)

    def test_capacity_error_message(self) -> None:
        """Test that the message names the implementation limit."""
        with pytest.raises(CapacityExceededError, match="too large for implementation"):
            FibonacciCache(5).lookup(7)

    def test_small_cache_fill(self) -> None:
        """Test a capacity-5 cache: index 4 fills 0..4, index 5 fails."""
        cache = FibonacciCache(5)
        assert cache.lookup(4) == 3.0
        assert cache.table == [0.0, 1.0, 1.0, 2.0, 3.0]
        with pytest.raises(CapacityExceededError):
            cache.lookup(5)

    def test_base_cases_skip_lookup_path(self) -> None:
        """Test that 0 and 1 are not counted as table hits."""
        cache = FibonacciCache(5)
        cache.lookup(0)
        cache.lookup(1)
        assert cache.hits == 0
        assert cache.fills == 0

    def test_second_call_does_not_recompute(self) -> None:
        """Test that a repeated lookup is answered from the table."""
        cache = FibonacciCache(100)
        first = cache.lookup(60)
        fills = cache.fills
        second = cache.lookup(60)

        assert first == second
        assert cache.fills == fills
        assert cache.hits == 1

    def test_fill_counts_every_slot(self) -> None:
        """Test that filling index x computes slots 2..x once each."""
        cache = FibonacciCache(100)
        cache.lookup(40)
        assert cache.fills == 39
        cache.lookup(45)
        assert cache.fills == 44

    def test_monotonic_fill(self) -> None:
        """Test that lower indices are known after a larger request."""
        cache = FibonacciCache(100)
        cache.lookup(50)
        assert cache.is_known(30)
        assert 30 in cache
        assert cache.lookup(30) == 832040
        assert cache.hits == 1

    def test_full_capacity_fill_is_not_recursive(self) -> None:
        """Test that a large capacity fills without hitting recursion limits."""
        cache = FibonacciCache(20000)
        assert math.isinf(cache.lookup(19999))
        assert cache.known_count == 20000

    def test_infinite_values_stay_cached(self) -> None:
        """Test that overflowed slots count as known."""
        cache = FibonacciCache(DEFAULT_CAPACITY)
        cache.lookup(1999)
        fills = cache.fills
        assert math.isinf(cache.lookup(1500))
        assert cache.fills == fills

    def test_is_known_out_of_range(self) -> None:
        """Test is_known with indices outside the table."""
        cache = FibonacciCache(5)
        assert not cache.is_known(-1)
        assert not cache.is_known(5)
        assert "3" not in cache

    def test_concurrent_lookups(self) -> None:
        """Test that concurrent first fills produce consistent values."""
        cache = FibonacciCache(1000)
        results: list[float] = []

        def worker() -> None:
            results.append(cache.lookup(900))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(set(results)) == 1
        assert cache.fills == 899
        assert cache.hits == 7


class TestCachedFib:
    """Tests for cached_fib and the default cache."""

    def test_uses_injected_cache(self) -> None:
        """Test that an explicit cache is filled instead of the default one."""
        cache = FibonacciCache(30)
        before = default_cache().fills
        assert cached_fib(25, cache) == 75025
        assert cache.is_known(25)
        assert default_cache().fills == before

    def test_default_cache(self) -> None:
        """Test that the default cache serves calls without a cache argument."""
        assert cached_fib(10) == 55.0
        assert default_cache().is_known(10)

    def test_default_capacity_boundary(self) -> None:
        """Test the capacity bound of the default cache."""
        assert math.isinf(cached_fib(DEFAULT_CAPACITY - 1))
        with pytest.raises(CapacityExceededError):
            cached_fib(DEFAULT_CAPACITY)

    def test_negative_is_nan(self) -> None:
        """Test that negative input yields NaN without raising."""
        assert math.isnan(cached_fib(-1))

    def test_reset_default_cache(self) -> None:
        """Test that resetting swaps in a fresh cache of the given capacity."""
        original = default_cache()
        try:
            fresh = reset_default_cache(8)
            assert default_cache() is fresh
            assert fresh.capacity == 8
            assert cached_fib(7) == 13.0
            with pytest.raises(CapacityExceededError):
                cached_fib(8)
        finally:
            reset_default_cache()
        assert default_cache() is not original
        assert default_cache().capacity == DEFAULT_CAPACITY

    def test_reset_rejects_bad_capacity(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that a failed reset keeps the old cache and logs nothing."""
        before = default_cache()
        with caplog.at_level(logging.WARNING, logger="fibvariants"):
            with pytest.raises(ValueError):
                reset_default_cache(1)

        assert default_cache() is before
        assert "Resetting" not in caplog.text

    def test_reset_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that a successful reset is logged."""
        with caplog.at_level(logging.WARNING, logger="fibvariants"):
            reset_default_cache()
        assert "Resetting default Fibonacci cache" in caplog.text
