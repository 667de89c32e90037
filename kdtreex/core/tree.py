"""Static k-d tree built by alternating-axis median splits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Sequence

from kdtreex import config as kx_config
from kdtreex.core.points import as_point_list, dimension_of
from kdtreex.diagnostics import log_operation
from kdtreex.errors import InvalidArgument
from kdtreex.logging import get_logger

LOGGER = get_logger("core.tree")


@dataclass(frozen=True, slots=True)
class KdNode:
    """One indexed point plus the subtrees it exclusively owns.

    For a node at depth ``d`` with ``axis = d % dimension`` every point under
    ``left`` has ``p[axis] <= point[axis]`` and every point under ``right``
    has ``p[axis] > point[axis]``, except that points tied with the split
    value may land on the right.
    """

    point: Any
    left: "KdNode | None" = None
    right: "KdNode | None" = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None


def _check_dimensions(points: Sequence[Any], expected: int) -> None:
    for point in points:
        if dimension_of(point) != expected:
            raise InvalidArgument(
                f"inconsistent point dimension: expected {expected}, got {dimension_of(point)}"
            )


def _build_node(points: List[Any], depth: int) -> KdNode | None:
    if not points:
        return None

    dimension = dimension_of(points[0])
    if dimension <= 0:
        raise InvalidArgument("points must have a positive dimension")
    # Every point must match before the axis key can be read safely.
    _check_dimensions(points, dimension)
    axis = depth % dimension

    ordered = sorted(points, key=lambda values: values[axis])
    median = len(ordered) // 2

    if len(ordered) == 1:
        return KdNode(point=ordered[median])

    return KdNode(
        point=ordered[median],
        left=_build_node(ordered[:median], depth + 1),
        right=_build_node(ordered[median + 1 :], depth + 1),
    )


def _height(node: KdNode | None) -> int:
    if node is None:
        return 0
    return 1 + max(_height(node.left), _height(node.right))


@dataclass(frozen=True)
class KdTree:
    """Immutable k-d tree over a fixed point set.

    Build with :meth:`from_points`; query with :meth:`nearest` and
    :meth:`nearest_within`. Queries never mutate the tree, so one instance can
    serve concurrent readers without locking.
    """

    root: KdNode | None = None
    dimension: int | None = None
    size: int = 0

    @classmethod
    def empty(cls) -> "KdTree":
        return cls()

    @classmethod
    def from_points(cls, points: Iterable[Any]) -> "KdTree":
        return build_tree(points)

    def is_empty(self) -> bool:
        return self.root is None

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[Any]:
        stack = [self.root] if self.root is not None else []
        while stack:
            node = stack.pop()
            yield node.point
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)

    def height(self) -> int:
        return _height(self.root)

    def nearest(self, point: Any, k: int = 1, metric: Any = None, **kwargs: Any) -> list:
        from kdtreex.queries.knn import nearest

        return nearest(self, point, k=k, metric=metric, **kwargs)

    def nearest_within(
        self, point: Any, radius: Any, k: int = 1, metric: Any = None, **kwargs: Any
    ) -> list:
        from kdtreex.queries.knn import nearest_within

        return nearest_within(self, point, radius, k=k, metric=metric, **kwargs)


def build_tree(points: Iterable[Any]) -> KdTree:
    """Build a :class:`KdTree`; raises `InvalidArgument` on mixed dimensions."""

    with log_operation(LOGGER, "build") as op_log:
        point_list = as_point_list(points)
        root = _build_node(point_list, 0)
        dimension = dimension_of(point_list[0]) if point_list else None
        tree = KdTree(root=root, dimension=dimension, size=len(point_list))
        op_log.add_metadata(points=tree.size, dimension=dimension, height=tree.height())

    if kx_config.runtime_config().check_invariants:
        for problem in find_violations(tree):
            LOGGER.warning("invariant violation: %s", problem)
    return tree


def _describe(point: Any) -> str:
    return "(" + ", ".join(str(point[i]) for i in range(dimension_of(point))) + ")"


def find_violations(
    tree: KdTree, *, strict: bool = True, allow_duplicates: bool = True
) -> List[str]:
    """Return human-readable descriptions of broken representation invariants.

    Every point is checked against the split of each ancestor, not only its
    parent. ``strict`` enforces ``right > split``; with ``strict=False`` ties
    on the right are tolerated. Repeated point values are only reported when
    ``allow_duplicates`` is false because construction never deduplicates.
    """

    problems: List[str] = []
    if tree.root is None:
        return problems

    seen: set[tuple] = set()
    # (node, depth, ancestor splits as (axis, split point, went_left))
    stack: List[tuple[KdNode, int, tuple]] = [(tree.root, 0, ())]
    while stack:
        node, depth, splits = stack.pop()
        point = node.point
        dimension = dimension_of(point)
        if dimension != tree.dimension:
            problems.append(f"point {point!r} has inconsistent dimension {dimension}")
            continue
        try:
            coords = tuple(point[i] for i in range(dimension))
        except (IndexError, KeyError, TypeError) as exc:
            problems.append(f"accessing point {point!r} failed: {exc}")
            continue

        if not allow_duplicates and coords in seen:
            problems.append(f"duplicate point found: {_describe(point)}")
        seen.add(coords)

        for axis, split, went_left in splits:
            value, bound = coords[axis], split[axis]
            if went_left and value > bound:
                problems.append(
                    f"{_describe(point)} is left of {_describe(split)} "
                    f"but {value} > {bound} on axis {axis}"
                )
            elif not went_left and (value <= bound if strict else value < bound):
                problems.append(
                    f"{_describe(point)} is right of {_describe(split)} "
                    f"but {value} <= {bound} on axis {axis}"
                )

        axis = depth % dimension
        if node.right is not None:
            stack.append((node.right, depth + 1, splits + ((axis, point, False),)))
        if node.left is not None:
            stack.append((node.left, depth + 1, splits + ((axis, point, True),)))
    return problems


__all__ = ["KdNode", "KdTree", "build_tree", "find_violations"]
