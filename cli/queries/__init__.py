from __future__ import annotations

from .app import QueryCLIOptions, main, run_queries
from .baselines import BaselineComparison, recall_against, run_baseline_comparisons
from .benchmark import QueryBenchmarkResult, benchmark_knn_latency, gaussian_points

__all__ = [
    "BaselineComparison",
    "QueryBenchmarkResult",
    "benchmark_knn_latency",
    "gaussian_points",
    "recall_against",
    "run_baseline_comparisons",
    "QueryCLIOptions",
    "run_queries",
    "main",
]
