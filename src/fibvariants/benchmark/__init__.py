"""Timing harness comparing the Fibonacci variants.

This package provides:
- Adaptive run counts targeting a coefficient of variation
- Warm and cold cache runs for the memoized variant
- YAML suite configuration
"""

from __future__ import annotations

from fibvariants.benchmark.runner import (
    BenchmarkConfig,
    BenchmarkRunner,
    BenchmarkRunResult,
    BenchmarkSuite,
    format_results_table,
    load_suite_config,
)
from fibvariants.benchmark.stats import BenchmarkStats, compute_stats, run_until_stable

__all__ = [
    "BenchmarkConfig",
    "BenchmarkRunResult",
    "BenchmarkRunner",
    "BenchmarkStats",
    "BenchmarkSuite",
    "compute_stats",
    "format_results_table",
    "load_suite_config",
    "run_until_stable",
]
