from __future__ import annotations

import time
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from kdtreex.baseline import BruteForceNeighbors

from .benchmark import run_tree_queries


@dataclass(frozen=True)
class BaselineComparison:
    name: str
    build_seconds: float
    elapsed_seconds: float
    latency_ms: float
    queries_per_second: float
    recall: float


def _row_key(point) -> tuple:
    return tuple(float(value) for value in point)


def recall_against(reference: Sequence[list], candidate: Sequence[list]) -> float:
    """Fraction of reference neighbours that also appear in ``candidate``."""

    expected = 0
    hits = 0
    for truth, found in zip(reference, candidate):
        truth_keys = [_row_key(point) for point in truth]
        found_keys = {_row_key(point) for point in found}
        expected += len(truth_keys)
        hits += sum(1 for key in truth_keys if key in found_keys)
    return hits / expected if expected else 1.0


def _run_brute_force_baseline(
    points: np.ndarray,
    queries: np.ndarray,
    *,
    k: int,
    radius: float | None,
    metric: str,
    tree_results: Sequence[list],
) -> BaselineComparison:
    start_build = time.perf_counter()
    baseline = BruteForceNeighbors.from_points(points)
    build_seconds = time.perf_counter() - start_build
    start = time.perf_counter()
    reference = run_tree_queries(baseline, queries, k=k, radius=radius, metric=metric)
    elapsed = time.perf_counter() - start
    qps = queries.shape[0] / elapsed if elapsed > 0 else float("inf")
    latency = (elapsed / queries.shape[0]) * 1e3 if queries.shape[0] else 0.0
    return BaselineComparison(
        name="brute-force",
        build_seconds=build_seconds,
        elapsed_seconds=elapsed,
        latency_ms=latency,
        queries_per_second=qps,
        recall=recall_against(reference, tree_results),
    )


def run_baseline_comparisons(
    points: np.ndarray,
    queries: np.ndarray,
    *,
    k: int,
    radius: float | None,
    metric: str,
    tree_results: Sequence[list],
    mode: str,
) -> List[BaselineComparison]:
    results: List[BaselineComparison] = []
    if mode == "none":
        return results
    if mode == "brute-force":
        results.append(
            _run_brute_force_baseline(
                points,
                queries,
                k=k,
                radius=radius,
                metric=metric,
                tree_results=tree_results,
            )
        )
        return results
    raise ValueError(f"Unknown baseline mode '{mode}'.")


__all__ = ["BaselineComparison", "recall_against", "run_baseline_comparisons"]
