import math

import numpy as np
import pytest

from kdtreex import InvalidArgument, Metric, MetricRegistry
from kdtreex import config as kx_config
from kdtreex.core.metrics import (
    available_metrics,
    chebyshev,
    euclidean,
    get_metric,
    manhattan,
    minkowski,
    register_metric,
    resolve_metric,
)


def test_builtin_metric_values():
    assert euclidean((0, 0), (3, 4)) == pytest.approx(5.0)
    assert manhattan((0, 0), (3, 4)) == pytest.approx(7.0)
    assert chebyshev((0, 0), (3, 4)) == pytest.approx(4.0)


def test_metrics_accept_numpy_operands():
    lhs = np.array([1.0, -2.0, 0.5])
    rhs = np.array([0.0, 1.0, 0.5])

    assert euclidean(lhs, rhs) == pytest.approx(math.sqrt(10.0))
    assert isinstance(euclidean(lhs, rhs), float)


def test_metric_operand_shape_mismatch_raises():
    with pytest.raises(InvalidArgument):
        euclidean((0, 0), (0, 0, 0))


def test_minkowski_family():
    lhs, rhs = (1.0, 5.0, -2.0), (4.0, 1.0, 0.0)

    assert minkowski(1)(lhs, rhs) == pytest.approx(manhattan(lhs, rhs))
    assert minkowski(2)(lhs, rhs) == pytest.approx(euclidean(lhs, rhs))
    assert minkowski(math.inf)(lhs, rhs) == pytest.approx(chebyshev(lhs, rhs))
    assert minkowski(3).name == "minkowski_3"
    assert minkowski(2.5).name == "minkowski_2.5"
    assert minkowski(math.inf).name == "minkowski_inf"


def test_minkowski_rejects_orders_below_one():
    with pytest.raises(InvalidArgument):
        minkowski(0.5)


def test_registry_register_and_get():
    registry = MetricRegistry()
    metric = Metric("Custom", lambda lhs, rhs: 0.0)

    registry.register(metric)

    assert registry.get("custom") is metric
    assert registry.get("CUSTOM") is metric
    assert registry.names() == ("custom",)


def test_registry_rejects_duplicates_unless_overwriting():
    registry = MetricRegistry()
    registry.register(Metric("dup", lambda lhs, rhs: 0.0))
    replacement = Metric("dup", lambda lhs, rhs: 1.0)

    with pytest.raises(ValueError):
        registry.register(replacement)
    registry.register(replacement, overwrite=True)

    assert registry.get("dup") is replacement


def test_registry_unknown_name_raises_key_error():
    with pytest.raises(KeyError):
        MetricRegistry().get("missing")


def test_available_metrics_lists_builtins():
    names = available_metrics()

    assert {"euclidean", "manhattan", "chebyshev"} <= set(names)
    assert list(names) == sorted(names)


def test_register_metric_makes_name_resolvable():
    metric = Metric("test_register_double_l1", lambda lhs, rhs: 2 * manhattan(lhs, rhs))

    register_metric(metric, overwrite=True)

    assert get_metric("test_register_double_l1") is metric
    assert resolve_metric("test_register_double_l1")((0, 0), (1, 1)) == pytest.approx(4.0)


def test_get_metric_defaults_to_runtime_config(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("KDTREEX_METRIC", "Manhattan")
    kx_config.reset_runtime_config_cache()
    try:
        assert get_metric().name == "manhattan"
        assert resolve_metric(None) is manhattan
    finally:
        kx_config.reset_runtime_config_cache()


def test_resolve_metric_passes_callables_through():
    def custom(lhs, rhs):
        return 0.0

    assert resolve_metric(custom) is custom
    assert resolve_metric(chebyshev) is chebyshev
    assert resolve_metric("euclidean") is euclidean


def test_resolve_metric_rejects_other_types():
    with pytest.raises(TypeError):
        resolve_metric(42)  # type: ignore[arg-type]
