from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple

import numpy as np
from numpy.random import Generator

from kdtreex.core.tree import KdTree


@dataclass(frozen=True)
class QueryBenchmarkResult:
    elapsed_seconds: float
    queries: int
    k: int
    latency_ms: float
    queries_per_second: float
    build_seconds: float | None = None
    mean_results: float = 0.0


def gaussian_points(rng: Generator, count: int, dimension: int) -> np.ndarray:
    """Sample `count` standard-normal points with the requested dimensionality."""

    if count <= 0 or dimension <= 0:
        return np.zeros((max(count, 0), max(dimension, 0)), dtype=np.float64)
    return rng.normal(loc=0.0, scale=1.0, size=(count, dimension)).astype(np.float64)


def run_tree_queries(
    tree: Any,
    queries: np.ndarray,
    *,
    k: int,
    radius: float | None,
    metric: str,
    **query_kwargs: Any,
) -> List[list]:
    results: List[list] = []
    for query in queries:
        if radius is None:
            results.append(tree.nearest(query, k=k, metric=metric, **query_kwargs))
        else:
            results.append(tree.nearest_within(query, radius, k=k, metric=metric, **query_kwargs))
    return results


def _summarise(
    elapsed: float,
    results: Sequence[list],
    *,
    k: int,
    build_seconds: float | None,
) -> QueryBenchmarkResult:
    count = len(results)
    qps = count / elapsed if elapsed > 0 else float("inf")
    latency = (elapsed / count) * 1e3 if count else 0.0
    mean_results = float(np.mean([len(found) for found in results])) if count else 0.0
    return QueryBenchmarkResult(
        elapsed_seconds=elapsed,
        queries=count,
        k=k,
        latency_ms=latency,
        queries_per_second=qps,
        build_seconds=build_seconds,
        mean_results=mean_results,
    )


def benchmark_knn_latency(
    points: np.ndarray,
    queries: np.ndarray,
    *,
    k: int,
    radius: float | None = None,
    metric: str = "euclidean",
    exact: bool | None = None,
) -> Tuple[KdTree, QueryBenchmarkResult, List[list]]:
    start_build = time.perf_counter()
    tree = KdTree.from_points(points)
    build_seconds = time.perf_counter() - start_build

    start = time.perf_counter()
    results = run_tree_queries(tree, queries, k=k, radius=radius, metric=metric, exact=exact)
    elapsed = time.perf_counter() - start
    return tree, _summarise(elapsed, results, k=k, build_seconds=build_seconds), results


__all__ = [
    "QueryBenchmarkResult",
    "benchmark_knn_latency",
    "gaussian_points",
    "run_tree_queries",
]
