"""Core data structures: points, metrics, and the k-d tree."""

from .metrics import (
    Metric,
    MetricRegistry,
    available_metrics,
    chebyshev,
    euclidean,
    get_metric,
    manhattan,
    minkowski,
    register_metric,
    resolve_metric,
)
from .points import SupportsPoint, dimension_of, make_point
from .tree import KdNode, KdTree, build_tree, find_violations

__all__ = [
    "KdNode",
    "KdTree",
    "build_tree",
    "find_violations",
    "Metric",
    "MetricRegistry",
    "available_metrics",
    "chebyshev",
    "euclidean",
    "get_metric",
    "manhattan",
    "minkowski",
    "register_metric",
    "resolve_metric",
    "SupportsPoint",
    "dimension_of",
    "make_point",
]
