"""Exhaustive-scan reference used to validate and benchmark the k-d tree."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Tuple

from kdtreex.core.metrics import MetricLike, resolve_metric
from kdtreex.core.points import as_point_list, dimension_of
from kdtreex.errors import InvalidArgument
from kdtreex.queries.knn import Neighbor, radius_equivalent


@dataclass(frozen=True)
class BruteForceNeighbors:
    points: Tuple[Any, ...]
    dimension: int | None

    @classmethod
    def from_points(cls, points: Iterable[Any]) -> "BruteForceNeighbors":
        point_list = as_point_list(points)
        dimension = dimension_of(point_list[0]) if point_list else None
        for point in point_list:
            if dimension_of(point) != dimension:
                raise InvalidArgument("inconsistent point dimension")
        return cls(points=tuple(point_list), dimension=dimension)

    def __len__(self) -> int:
        return len(self.points)

    def _scan(self, point: Any, k: int, radius: Any, metric: MetricLike) -> List[Neighbor]:
        if k < 0:
            raise InvalidArgument(f"k must be non-negative, got {k}")
        if self.points and dimension_of(point) != self.dimension:
            raise InvalidArgument("query point dimension does not match indexed points")
        if k == 0 or not self.points:
            return []
        distance = resolve_metric(metric)
        matches = [Neighbor(candidate, distance(point, candidate)) for candidate in self.points]
        if radius is not None:
            bound = radius_equivalent(point, radius, distance)
            matches = [match for match in matches if match.distance < bound]
        matches.sort(key=lambda match: match.distance)
        return matches[:k]

    def nearest(
        self,
        point: Any,
        *,
        k: int = 1,
        metric: MetricLike = None,
        return_distances: bool = False,
    ) -> list:
        matches = self._scan(point, k, None, metric)
        return matches if return_distances else [match.point for match in matches]

    def nearest_within(
        self,
        point: Any,
        radius: Any,
        *,
        k: int = 1,
        metric: MetricLike = None,
        return_distances: bool = False,
    ) -> list:
        if not radius > 0:
            raise InvalidArgument(f"radius must be positive, got {radius}")
        matches = self._scan(point, k, radius, metric)
        return matches if return_distances else [match.point for match in matches]


__all__ = ["BruteForceNeighbors"]
