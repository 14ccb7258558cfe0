"""Timing statistics for Fibonacci benchmarks.

Measurements are collected until their coefficient of variation (CV) drops
below a target, and outliers are identified with the IQR rule before the
summary is computed.
"""

from __future__ import annotations

import statistics
from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class BenchmarkStats:
    """Summary of a series of timed runs.

    Attributes:
        times: Raw timings in seconds, outliers included.
        mean: Mean of the retained timings.
        median: Median of the retained timings.
        stddev: Sample standard deviation of the retained timings.
        cv: Coefficient of variation (stddev / mean).
        min: Fastest retained timing.
        max: Slowest retained timing.
        outliers: Timings excluded by the IQR rule.
        runs_to_stable: Runs performed before the CV target was met.
    """

    times: tuple[float, ...]
    mean: float
    median: float
    stddev: float
    cv: float
    min: float
    max: float
    outliers: tuple[float, ...] = field(default_factory=tuple)
    runs_to_stable: int = 0


EMPTY_STATS = BenchmarkStats(
    times=(), mean=0.0, median=0.0, stddev=0.0, cv=0.0, min=0.0, max=0.0
)


def coefficient_of_variation(data: list[float]) -> float:
    """Return stddev / mean, or 0.0 when it is undefined."""
    if len(data) < 2:
        return 0.0
    mean = statistics.mean(data)
    if mean <= 0:
        return 0.0
    return statistics.stdev(data) / mean


def detect_outliers(data: list[float], factor: float = 1.5) -> list[float]:
    """Return values outside [Q1 - factor*IQR, Q3 + factor*IQR].

    Fewer than four values are never considered to contain outliers.
    """
    if len(data) < 4:
        return []

    q1, _, q3 = statistics.quantiles(data, n=4, method="inclusive")
    spread = factor * (q3 - q1)
    return [x for x in data if x < q1 - spread or x > q3 + spread]


def compute_stats(
    times: list[float], remove_outliers: bool = True, runs_to_stable: int = 0
) -> BenchmarkStats:
    """Summarize timing data.

    Args:
        times: Timings in seconds.
        remove_outliers: Exclude IQR outliers from the summary values.
        runs_to_stable: Recorded as-is in the result.
    """
    if not times:
        return EMPTY_STATS

    outliers = detect_outliers(times)
    kept = times
    if remove_outliers and outliers:
        kept = [t for t in times if t not in outliers]
        if len(kept) < 2:
            kept = times

    mean = statistics.mean(kept)
    stddev = statistics.stdev(kept) if len(kept) > 1 else 0.0

    return BenchmarkStats(
        times=tuple(times),
        mean=mean,
        median=statistics.median(kept),
        stddev=stddev,
        cv=stddev / mean if mean > 0 else 0.0,
        min=min(kept),
        max=max(kept),
        outliers=tuple(outliers),
        runs_to_stable=runs_to_stable,
    )


def run_until_stable(
    runner: Callable[[], float],
    min_runs: int = 5,
    max_runs: int = 50,
    target_cv: float = 0.01,
    warmup: int = 3,
    batch_size: int = 5,
) -> BenchmarkStats:
    """Call runner until its timings are stable.

    The first `warmup` results are discarded. After `min_runs` timed runs,
    batches of `batch_size` runs are added until the CV is at most
    `target_cv` or `max_runs` timings have been taken.

    Args:
        runner: Performs one run and returns its duration in seconds.
    """
    for _ in range(warmup):
        runner()

    times = [runner() for _ in range(min_runs)]

    while len(times) < max_runs and coefficient_of_variation(times) > target_cv:
        for _ in range(min(batch_size, max_runs - len(times))):
            times.append(runner())

    return compute_stats(times, remove_outliers=True, runs_to_stable=len(times))


def format_stats(stats: BenchmarkStats, unit: str = "us") -> str:
    """Render stats as e.g. "12.3us +/- 0.4us (CV=3.25%, 10 runs)".

    Supported units are "s", "ms" and "us".
    """
    multiplier = {"s": 1.0, "ms": 1e3, "us": 1e6}[unit]
    mean = stats.mean * multiplier
    stddev = stats.stddev * multiplier
    cv_pct = stats.cv * 100

    return f"{mean:.1f}{unit} +/- {stddev:.1f}{unit} (CV={cv_pct:.2f}%, {len(stats.times)} runs)"
