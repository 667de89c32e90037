from __future__ import annotations

import math
from bisect import bisect_left
from operator import attrgetter
from typing import Any, List, NamedTuple

from kdtreex import config as kx_config
from kdtreex.core.metrics import DistanceFn, MetricLike, resolve_metric
from kdtreex.core.points import dimension_of, make_point
from kdtreex.core.tree import KdNode, KdTree
from kdtreex.diagnostics import log_operation
from kdtreex.errors import InvalidArgument
from kdtreex.logging import get_logger

LOGGER = get_logger("queries.knn")


class Neighbor(NamedTuple):
    point: Any
    distance: Any


_by_distance = attrgetter("distance")


def radius_equivalent(template: Any, radius: Any, metric: DistanceFn) -> Any:
    """Translate a scalar radius into a value comparable with ``metric`` output.

    The radius is measured from the origin to a point offset by ``radius``
    along the first axis, both built like ``template``. This is exact only for
    metrics that are translation-invariant and treat every axis alike, such as
    the Minkowski family.
    """

    dimension = dimension_of(template)
    origin = make_point(template, [0] * dimension)
    surface = make_point(template, [radius] + [0] * (dimension - 1))
    return metric(origin, surface)


def _search(
    query: Any,
    node: KdNode,
    *,
    k: int,
    depth: int,
    bound: Any,
    distance: DistanceFn,
    exact: bool,
) -> List[Neighbor]:
    """Return up to ``k`` matches under ``node`` sorted by ascending distance.

    ``bound`` is the radius-equivalent distance, or ``None`` when unbounded.
    """

    current = Neighbor(node.point, distance(query, node.point))
    within_radius = bound is None or current.distance < bound

    if node.is_leaf:
        return [current] if within_radius else []

    axis = depth % dimension_of(query)
    split = node.point[axis]
    if query[axis] <= split:
        preferred, other = node.left, node.right
    else:
        preferred, other = node.right, node.left

    nearest: List[Neighbor] = []
    if preferred is not None:
        nearest = _search(
            query, preferred, k=k, depth=depth + 1, bound=bound, distance=distance, exact=exact
        )
    best_so_far = nearest[-1].distance if nearest else math.inf

    # The other side can only hold a closer point if the splitting plane is
    # nearer than the current worst match.
    plane_closer = abs(query[axis] - split) < best_so_far
    if exact:
        underfilled = len(nearest) < k
    else:
        # Depth-scaled guard: not a tight bound, it mostly over-explores.
        underfilled = len(nearest) + depth < k

    if other is not None and (plane_closer or underfilled):
        nearest = nearest + _search(
            query, other, k=k, depth=depth + 1, bound=bound, distance=distance, exact=exact
        )
        nearest.sort(key=_by_distance)
        del nearest[k:]

    if not within_radius:
        return nearest

    position = bisect_left(nearest, current.distance, key=_by_distance)
    if position == len(nearest) and len(nearest) >= k:
        return nearest
    nearest.insert(position, current)
    del nearest[k:]
    return nearest


def _validate_query(tree: KdTree, point: Any, k: int) -> None:
    if k < 0:
        raise InvalidArgument(f"k must be non-negative, got {k}")
    if tree.is_empty():
        return
    query_dimension = dimension_of(point)
    if query_dimension != tree.dimension:
        raise InvalidArgument(
            f"query point has dimension {query_dimension} but the tree indexes "
            f"points of dimension {tree.dimension}"
        )


def _run_query(
    tree: KdTree,
    point: Any,
    *,
    k: int,
    radius: Any,
    metric: MetricLike,
    exact: bool | None,
) -> List[Neighbor]:
    _validate_query(tree, point, k)
    if k == 0 or tree.root is None:
        return []
    distance = resolve_metric(metric)
    if exact is None:
        exact = kx_config.runtime_config().exact_search
    bound = None if radius is None else radius_equivalent(point, radius, distance)
    return _search(
        point, tree.root, k=k, depth=0, bound=bound, distance=distance, exact=exact
    )


def _format_results(matches: List[Neighbor], return_distances: bool) -> list:
    if return_distances:
        return matches
    return [match.point for match in matches]


def nearest(
    tree: KdTree,
    point: Any,
    *,
    k: int = 1,
    metric: MetricLike = None,
    return_distances: bool = False,
    exact: bool | None = None,
) -> list:
    """Return up to ``k`` indexed points closest to ``point``, nearest first.

    Fewer than ``k`` points come back only when the tree holds fewer. With
    ``return_distances`` each entry is a :class:`Neighbor`. ``exact`` swaps the
    depth-scaled backtracking guard for a tight one; ``None`` defers to the
    runtime configuration.
    """

    with log_operation(LOGGER, "nearest") as op_log:
        matches = _run_query(tree, point, k=k, radius=None, metric=metric, exact=exact)
        op_log.add_metadata(k=k, results=len(matches))
    return _format_results(matches, return_distances)


def nearest_within(
    tree: KdTree,
    point: Any,
    radius: Any,
    *,
    k: int = 1,
    metric: MetricLike = None,
    return_distances: bool = False,
    exact: bool | None = None,
) -> list:
    """Like :func:`nearest` but only keep points strictly inside ``radius``.

    ``radius`` is a coordinate-space length converted with
    :func:`radius_equivalent`; it must be positive.
    """

    if not radius > 0:
        raise InvalidArgument(f"radius must be positive, got {radius}")
    with log_operation(LOGGER, "nearest_within") as op_log:
        matches = _run_query(tree, point, k=k, radius=radius, metric=metric, exact=exact)
        op_log.add_metadata(k=k, radius=radius, results=len(matches))
    return _format_results(matches, return_distances)


__all__ = ["Neighbor", "nearest", "nearest_within", "radius_equivalent"]
