"""Point capability consumed by the index.

A point is any object with a length (its dimension) and indexed access to
its coordinates. Nothing here inspects attribute names; types that need a
custom constructor expose ``from_values``.
"""

from __future__ import annotations

from typing import Any, Iterable, Protocol, Sequence, runtime_checkable

import numpy as np

from kdtreex.errors import InvalidArgument


@runtime_checkable
class SupportsPoint(Protocol):
    def __len__(self) -> int:
        ...

    def __getitem__(self, index: int) -> Any:
        ...


class PointFactory(Protocol):
    @classmethod
    def from_values(cls, values: Sequence[Any]) -> SupportsPoint:
        ...


def dimension_of(point: Any) -> int:
    try:
        return len(point)
    except TypeError as exc:
        raise InvalidArgument(
            f"point of type {type(point).__name__} does not report a dimension"
        ) from exc


def make_point(template: Any, values: Iterable[Any]) -> Any:
    """Build a point of the same kind as ``template`` from ``values``."""

    values = list(values)
    point_type = type(template)
    factory = getattr(point_type, "from_values", None)
    if callable(factory):
        return factory(values)
    if isinstance(template, np.ndarray):
        dtype = np.result_type(template.dtype, *(np.asarray(v).dtype for v in values))
        return np.asarray(values, dtype=dtype)
    if isinstance(template, tuple) and hasattr(point_type, "_make"):
        return point_type._make(values)
    try:
        return point_type(values)
    except TypeError:
        return _from_scalars(point_type, values)


def _from_scalars(point_type: type, values: list) -> Any:
    try:
        return point_type(*values)
    except TypeError as exc:
        raise InvalidArgument(
            f"cannot build a {point_type.__name__} from {len(values)} values; "
            "give the type a from_values classmethod"
        ) from exc


def as_point_list(points: Iterable[Any]) -> list:
    """Materialise an iterable of points; 2-D arrays contribute their rows."""

    if isinstance(points, np.ndarray):
        if points.ndim != 2:
            raise InvalidArgument(
                f"point arrays must be two-dimensional (n, d), got {points.ndim}D"
            )
        return [row for row in points]
    return list(points)


__all__ = [
    "PointFactory",
    "SupportsPoint",
    "as_point_list",
    "dimension_of",
    "make_point",
]
