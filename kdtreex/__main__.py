#!/usr/bin/env python
"""Quick-start guide for kdtreex library usage.

Run with: python -m kdtreex
"""

from __future__ import annotations

QUICKSTART = """\
================================================================================
                                   KDTREEX
           Static k-d tree for k-nearest-neighbour and radius queries
================================================================================

INSTALLATION
------------
    pip install kdtreex

BUILDING A TREE
---------------
    from kdtreex import KdTree

    # Any points with len() and indexing work: tuples, lists, numpy rows...
    tree = KdTree.from_points([(4, -1), (-10, -1), (-9, 1), (5, -4), (-8, 1)])

    # ...or a (n, d) numpy array
    import numpy as np
    tree = KdTree.from_points(np.random.randn(10000, 3))

QUERYING
--------
    # k nearest points, closest first
    tree.nearest((9, 5), k=3)

    # k nearest points strictly inside radius 10
    tree.nearest_within((9, 5), 10, k=3)

    # with distances
    tree.nearest((9, 5), k=3, return_distances=True)   # [Neighbor(point, distance), ...]

METRICS
-------
    from kdtreex import available_metrics, minkowski
    available_metrics()                        # ('chebyshev', 'euclidean', 'manhattan')
    tree.nearest((9, 5), k=3, metric="manhattan")
    tree.nearest((9, 5), k=3, metric=minkowski(3))

    Radius queries convert the radius with the metric itself, which is exact
    for translation-invariant metrics that treat all axes alike.

ENVIRONMENT
-----------
    KDTREEX_LOG_LEVEL           logging level for the 'kdtreex' logger (WARNING)
    KDTREEX_ENABLE_DIAGNOSTICS  record cpu/rss per operation (1)
    KDTREEX_METRIC              default metric name (euclidean)
    KDTREEX_CHECK_INVARIANTS    validate every freshly built tree (0)
    KDTREEX_EXACT_SEARCH        use the tight backtracking guard by default (0)

BENCHMARKING CLI
----------------
    kdtreex-queries --dimension 3 --tree-points 8192 --k 10 --baseline brute-force

================================================================================
"""


def main() -> None:
    """Print quick-start guide."""
    print(QUICKSTART)


if __name__ == "__main__":
    main()
