"""Benchmark orchestration.

Loads a suite description from YAML, times each requested Fibonacci variant
with adaptive run counts, and checks that the variants agree on the value
they compute.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from fibvariants.benchmark.stats import BenchmarkStats, compute_stats, run_until_stable
from fibvariants.cached import DEFAULT_CAPACITY, FibonacciCache
from fibvariants.errors import FibonacciError
from fibvariants.variants import VARIANTS, get_variant, values_agree

logger = logging.getLogger(__name__)


@dataclass
class BenchmarkConfig:
    """Configuration for a single benchmark.

    Attributes:
        name: Benchmark identifier.
        n: Fibonacci index to compute.
        variants: Names of the variants to time.
        loops: Calls per timed run; timings are reported per call.
        cold_cache: Give the cached variant an empty cache on every run.
        enabled: Whether the benchmark runs at all.
    """

    name: str
    n: int
    variants: list[str] = field(default_factory=lambda: list(VARIANTS))
    loops: int = 1
    cold_cache: bool = False
    enabled: bool = True

    def __post_init__(self) -> None:
        if self.loops < 1:
            msg = f"{self.name}: 'loops' must be at least 1, got {self.loops}"
            raise ValueError(msg)


@dataclass
class BenchmarkSuite:
    """A set of benchmarks plus the settings shared by all of them."""

    name: str
    benchmarks: list[BenchmarkConfig]
    cache_capacity: int = DEFAULT_CAPACITY
    target_cv: float = 0.01
    min_runs: int = 5
    max_runs: int = 50
    warmup: int = 3


@dataclass
class BenchmarkRunResult:
    """Result of timing one variant on one benchmark.

    Attributes:
        benchmark: Benchmark name.
        variant: Variant name.
        n: Fibonacci index computed.
        value: Value the variant returned (NaN if it failed).
        stats: Per-call timing statistics.
        error: Error message if the variant raised.
    """

    benchmark: str
    variant: str
    n: int
    value: float
    stats: BenchmarkStats
    error: str | None = None


@dataclass
class BenchmarkProgress:
    """Progress callback information."""

    benchmark: str
    variant: str
    phase: str
    completed: int
    total: int


ProgressCallback = Callable[[BenchmarkProgress], None]


def _require_int(
    data: dict, key: str, where: str, minimum: int = 0, default: int | None = None
) -> int:
    value = data.get(key, default)
    if not isinstance(value, int) or isinstance(value, bool) or value < minimum:
        msg = f"{where}: '{key}' must be an integer >= {minimum}, got {value!r}"
        raise ValueError(msg)
    return value


def _require_number(data: dict, key: str, where: str, default: float) -> float:
    value = data.get(key, default)
    if not isinstance(value, (int, float)) or isinstance(value, bool) or value < 0:
        msg = f"{where}: '{key}' must be a non-negative number, got {value!r}"
        raise ValueError(msg)
    return float(value)


def _require_mapping(value: object, where: str) -> dict:
    if not isinstance(value, dict):
        msg = f"{where} must be a mapping, got {type(value).__name__}"
        raise ValueError(msg)
    return value


def _require_variants(data: dict, where: str) -> list[str]:
    if "variants" not in data:
        return list(VARIANTS)
    variants = data["variants"]
    if (
        not isinstance(variants, list)
        or not variants
        or not all(isinstance(v, str) for v in variants)
    ):
        msg = (
            f"{where}: 'variants' must be a non-empty list of names, "
            f"got {variants!r}"
        )
        raise ValueError(msg)
    for variant in variants:
        get_variant(variant)
    return list(variants)


def load_suite_config(config_path: Path) -> BenchmarkSuite:
    """Load a benchmark suite from YAML.

    Args:
        config_path: Path to suite.yaml file.

    Returns:
        BenchmarkSuite configuration.

    Raises:
        ValueError: If a setting is malformed or names an unknown variant.
    """
    with Path(config_path).open() as f:
        data = yaml.safe_load(f)
    data = _require_mapping(data if data is not None else {}, "suite")

    bench_list = data.get("benchmarks", [])
    if not isinstance(bench_list, list):
        msg = f"suite: 'benchmarks' must be a list, got {bench_list!r}"
        raise ValueError(msg)

    benchmarks = []
    for index, entry in enumerate(bench_list):
        bench_data = _require_mapping(entry, f"benchmark #{index}")
        name = bench_data.get("name") or f"benchmark-{index}"
        benchmarks.append(
            BenchmarkConfig(
                name=name,
                n=_require_int(bench_data, "n", name),
                variants=_require_variants(bench_data, name),
                loops=_require_int(bench_data, "loops", name, 1, default=1),
                cold_cache=bench_data.get("cold_cache", False),
                enabled=bench_data.get("enabled", True),
            )
        )

    min_runs = _require_int(data, "min_runs", "suite", 1, default=5)
    max_runs = _require_int(data, "max_runs", "suite", min_runs, default=50)
    return BenchmarkSuite(
        name=data.get("name", "fibonacci"),
        benchmarks=benchmarks,
        cache_capacity=_require_int(
            data, "cache_capacity", "suite", 2, default=DEFAULT_CAPACITY
        ),
        target_cv=_require_number(data, "target_cv", "suite", 0.01),
        min_runs=min_runs,
        max_runs=max_runs,
        warmup=_require_int(data, "warmup", "suite", 0, default=3),
    )


@dataclass
class BenchmarkRunner:
    """Times Fibonacci variants over a suite of benchmarks.

    Attributes:
        suite: Benchmark suite configuration.
        progress_callback: Optional callback for progress updates.
    """

    suite: BenchmarkSuite
    progress_callback: ProgressCallback | None = None

    def _notify(
        self, config: BenchmarkConfig, variant: str, phase: str, done: int
    ) -> None:
        if self.progress_callback:
            self.progress_callback(
                BenchmarkProgress(
                    benchmark=config.name,
                    variant=variant,
                    phase=phase,
                    completed=done,
                    total=len(config.variants),
                )
            )

    def _make_timer(
        self, config: BenchmarkConfig, variant_name: str
    ) -> Callable[[], float]:
        variant = get_variant(variant_name)
        capacity = self.suite.cache_capacity
        shared_cache = FibonacciCache(capacity)
        n = config.n
        loops = config.loops

        def timed_run() -> float:
            cache = FibonacciCache(capacity) if config.cold_cache else shared_cache
            start = time.perf_counter()
            for _ in range(loops):
                variant(n, cache)
            return (time.perf_counter() - start) / loops

        return timed_run

    def time_variant(
        self, config: BenchmarkConfig, variant_name: str
    ) -> BenchmarkRunResult:
        """Time a single variant on one benchmark.

        The variant is called once up front; if that raises a
        FibonacciError no timing is attempted and the error is recorded.
        """
        variant = get_variant(variant_name)
        cache = FibonacciCache(self.suite.cache_capacity)
        try:
            value = float(variant(config.n, cache))
        except FibonacciError as e:
            logger.info("%s/%s failed: %s", config.name, variant_name, e)
            return BenchmarkRunResult(
                benchmark=config.name,
                variant=variant_name,
                n=config.n,
                value=math.nan,
                stats=compute_stats([]),
                error=str(e),
            )

        stats = run_until_stable(
            self._make_timer(config, variant_name),
            min_runs=self.suite.min_runs,
            max_runs=self.suite.max_runs,
            target_cv=self.suite.target_cv,
            warmup=self.suite.warmup,
        )
        logger.info(
            "%s/%s: fib(%d) in %.3gs per call over %d runs",
            config.name,
            variant_name,
            config.n,
            stats.mean,
            len(stats.times),
        )
        return BenchmarkRunResult(
            benchmark=config.name,
            variant=variant_name,
            n=config.n,
            value=value,
            stats=stats,
        )

    def run_benchmark(self, config: BenchmarkConfig) -> list[BenchmarkRunResult]:
        """Time every variant listed by the benchmark."""
        results = []
        for done, variant_name in enumerate(config.variants):
            self._notify(config, variant_name, "timing", done)
            results.append(self.time_variant(config, variant_name))
        self._notify(config, "", "done", len(config.variants))

        succeeded = [r.value for r in results if r.error is None]
        if not values_agree(succeeded):
            logger.warning(
                "%s: variants disagree on fib(%d): %s",
                config.name,
                config.n,
                {r.variant: r.value for r in results if r.error is None},
            )
        return results

    def run_all(self) -> list[BenchmarkRunResult]:
        """Run every enabled benchmark in the suite."""
        results = []
        for config in self.suite.benchmarks:
            if not config.enabled:
                logger.info("Skipping disabled benchmark %s", config.name)
                continue
            results.extend(self.run_benchmark(config))
        return results


def find_mismatches(results: list[BenchmarkRunResult]) -> list[str]:
    """Return the names of benchmarks whose variants disagree."""
    values: dict[str, list[float]] = {}
    for result in results:
        if result.error is None:
            values.setdefault(result.benchmark, []).append(result.value)
    return sorted(name for name, vals in values.items() if not values_agree(vals))


def format_results_table(results: list[BenchmarkRunResult]) -> str:
    """Format results as a table of mean microseconds per call.

    Failed runs show "error", variants not run show "-".
    """
    benchmarks: dict[str, dict[str, BenchmarkRunResult]] = {}
    for result in results:
        benchmarks.setdefault(result.benchmark, {})[result.variant] = result

    seen = {r.variant for r in results}
    columns = [v for v in VARIANTS if v in seen]

    lines = ["=" * 60, "FIBONACCI BENCHMARK (us per call)", "=" * 60]
    header = f"{'Benchmark':<15} {'n':>6}"
    for variant in columns:
        header += f" {variant:>12}"
    lines.append(header)
    lines.append("-" * (22 + 13 * len(columns)))

    for bench_name, by_variant in benchmarks.items():
        n = next(iter(by_variant.values())).n
        row = f"{bench_name:<15} {n:>6}"
        for variant in columns:
            result = by_variant.get(variant)
            if result is None:
                row += f" {'-':>12}"
            elif result.error is not None:
                row += f" {'error':>12}"
            else:
                row += f" {result.stats.mean * 1e6:>12.2f}"
        lines.append(row)

    mismatches = find_mismatches(results)
    if mismatches:
        lines.append("")
        lines.append("Variants disagree on: " + ", ".join(mismatches))

    return "\n".join(lines)
