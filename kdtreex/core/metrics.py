from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Protocol, Tuple, Union

import numpy as np

from kdtreex import config as kx_config
from kdtreex.errors import InvalidArgument


class DistanceFn(Protocol):
    def __call__(self, lhs: Any, rhs: Any) -> float:
        ...


@dataclass(frozen=True)
class Metric:
    """Named distance function between two points of equal dimension.

    The index only compares distances, so any function that is zero on
    identical points, symmetric, and monotone in each per-axis absolute
    difference is acceptable. Radius queries additionally assume the metric
    is translation-invariant and treats every axis alike (true for the
    Minkowski family registered here).
    """

    name: str
    distance: DistanceFn

    def __call__(self, lhs: Any, rhs: Any) -> float:
        return self.distance(lhs, rhs)


MetricLike = Union[str, Metric, Callable[[Any, Any], Any], None]


class MetricRegistry:
    """Minimal registry for runtime-selectable metrics."""

    def __init__(self) -> None:
        self._metrics: Dict[str, Metric] = {}

    def register(self, metric: Metric, *, overwrite: bool = False) -> None:
        name = metric.name.lower()
        if not overwrite and name in self._metrics:
            raise ValueError(f"Metric '{metric.name}' already registered.")
        self._metrics[name] = metric

    def get(self, name: str) -> Metric:
        key = name.lower()
        if key not in self._metrics:
            raise KeyError(f"Metric '{name}' not registered.")
        return self._metrics[key]

    def names(self) -> Tuple[str, ...]:
        return tuple(sorted(self._metrics.keys()))


def _difference(lhs: Any, rhs: Any) -> np.ndarray:
    lhs_arr = np.asarray(lhs, dtype=np.float64)
    rhs_arr = np.asarray(rhs, dtype=np.float64)
    if lhs_arr.shape != rhs_arr.shape:
        raise InvalidArgument("Metric operands must have identical shapes.")
    return lhs_arr - rhs_arr


def _euclidean(lhs: Any, rhs: Any) -> float:
    diff = _difference(lhs, rhs)
    return float(np.sqrt(np.sum(diff * diff)))


def _manhattan(lhs: Any, rhs: Any) -> float:
    return float(np.sum(np.abs(_difference(lhs, rhs))))


def _chebyshev(lhs: Any, rhs: Any) -> float:
    diff = _difference(lhs, rhs)
    if diff.size == 0:
        return 0.0
    return float(np.max(np.abs(diff)))


euclidean = Metric("euclidean", _euclidean)
manhattan = Metric("manhattan", _manhattan)
chebyshev = Metric("chebyshev", _chebyshev)


def minkowski(p: float) -> Metric:
    """Return the L``p`` metric for ``p >= 1`` (``inf`` gives Chebyshev)."""

    if math.isinf(p):
        return Metric("minkowski_inf", _chebyshev)
    if p < 1:
        raise InvalidArgument(f"Minkowski order must be >= 1, got {p}")
    order = float(p)

    def _distance(lhs: Any, rhs: Any) -> float:
        diff = np.abs(_difference(lhs, rhs))
        return float(np.sum(diff**order) ** (1.0 / order))

    return Metric(f"minkowski_{p:g}", _distance)


def _load_registry() -> MetricRegistry:
    registry = MetricRegistry()
    for metric in (euclidean, manhattan, chebyshev):
        registry.register(metric)
    return registry


_REGISTRY = _load_registry()


def get_metric(name: str | None = None) -> Metric:
    """Return a registered metric, defaulting to the runtime-selected metric."""

    if name is None:
        name = kx_config.runtime_config().metric
    return _REGISTRY.get(name)


def register_metric(metric: Metric, *, overwrite: bool = False) -> None:
    _REGISTRY.register(metric, overwrite=overwrite)


def available_metrics() -> Tuple[str, ...]:
    return _REGISTRY.names()


def resolve_metric(metric: MetricLike) -> Callable[[Any, Any], Any]:
    """Turn a name, `Metric`, or bare callable into a distance function."""

    if metric is None or isinstance(metric, str):
        return get_metric(metric)
    if callable(metric):
        return metric
    raise TypeError(f"Expected a metric name or callable, got {type(metric).__name__}")


__all__ = [
    "DistanceFn",
    "Metric",
    "MetricLike",
    "MetricRegistry",
    "available_metrics",
    "chebyshev",
    "euclidean",
    "get_metric",
    "manhattan",
    "minkowski",
    "register_metric",
    "resolve_metric",
]
