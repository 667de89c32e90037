"""kdtreex: static k-d tree for k-nearest-neighbour queries.

Quick Start
-----------
>>> from kdtreex import KdTree
>>>
>>> tree = KdTree.from_points([(4, -1), (-10, -1), (-9, 1), (5, -4), (-8, 1)])
>>> tree.nearest((9, 5), k=2)
[(4, -1), (5, -4)]
>>> tree.nearest_within((9, 5), 10, k=3)
[(4, -1), (5, -4)]

Classes
-------
KdTree : Immutable median-split k-d tree.
Metric : Named distance function; see ``available_metrics()``.
BruteForceNeighbors : Exhaustive-scan reference with the same query API.
"""

from importlib.metadata import PackageNotFoundError, version as _pkg_version

try:
    __version__ = _pkg_version("kdtreex")
except PackageNotFoundError:  # pragma: no cover - running from a source checkout
    __version__ = "0.0.1"

from .baseline import BruteForceNeighbors
from .core import (
    KdNode,
    KdTree,
    Metric,
    MetricRegistry,
    available_metrics,
    build_tree,
    find_violations,
    get_metric,
    minkowski,
    register_metric,
)
from .errors import InvalidArgument
from .queries import Neighbor, nearest, nearest_within

__all__ = [
    "__version__",
    "KdTree",
    "KdNode",
    "build_tree",
    "find_violations",
    "nearest",
    "nearest_within",
    "Neighbor",
    "InvalidArgument",
    "Metric",
    "MetricRegistry",
    "available_metrics",
    "get_metric",
    "minkowski",
    "register_metric",
    "BruteForceNeighbors",
]
