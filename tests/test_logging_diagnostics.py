import logging

import pytest

from kdtreex import KdTree, nearest, nearest_within
from kdtreex import config as kx_config
from kdtreex.diagnostics import OperationLog, ResourceSnapshot, log_operation
from kdtreex.logging import get_logger

SAMPLE_POINTS = [(4, -1), (-10, -1), (-9, 1), (5, -4), (-8, 1)]


def _op_messages(caplog: pytest.LogCaptureFixture, op: str) -> list:
    return [record.message for record in caplog.records if f"op={op}" in record.message]


def test_get_logger_namespaces_under_package():
    assert get_logger().name == "kdtreex"
    assert get_logger("queries.knn").name == "kdtreex.queries.knn"
    assert get_logger("kdtreex.core.tree").name == "kdtreex.core.tree"


def test_build_emits_resource_log(caplog: pytest.LogCaptureFixture) -> None:
    kx_config.reset_runtime_config_cache()
    caplog.set_level(logging.INFO, logger="kdtreex.core.tree")

    KdTree.from_points(SAMPLE_POINTS)

    messages = _op_messages(caplog, "build")
    assert messages, "expected build operation log"
    message = messages[-1]
    assert "wall_ms=" in message
    assert "cpu_user_ms=" in message
    assert "rss_delta=" in message
    assert "points=5" in message
    assert "dimension=2" in message
    assert "height=3" in message


def test_nearest_emits_resource_log(caplog: pytest.LogCaptureFixture) -> None:
    kx_config.reset_runtime_config_cache()
    tree = KdTree.from_points(SAMPLE_POINTS)
    caplog.set_level(logging.INFO, logger="kdtreex.queries.knn")

    nearest(tree, (9, 5), k=2)

    messages = _op_messages(caplog, "nearest")
    assert messages, "expected nearest operation log"
    assert "k=2" in messages[-1]
    assert "results=2" in messages[-1]


def test_nearest_within_logs_radius(caplog: pytest.LogCaptureFixture) -> None:
    kx_config.reset_runtime_config_cache()
    tree = KdTree.from_points(SAMPLE_POINTS)
    caplog.set_level(logging.INFO, logger="kdtreex.queries.knn")

    nearest_within(tree, (9, 5), 10, k=3)

    messages = _op_messages(caplog, "nearest_within")
    assert messages, "expected nearest_within operation log"
    assert "radius=10" in messages[-1]
    assert "results=2" in messages[-1]


def test_disabled_diagnostics_report_na(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setenv("KDTREEX_ENABLE_DIAGNOSTICS", "0")
    kx_config.reset_runtime_config_cache()
    caplog.set_level(logging.INFO, logger="kdtreex.queries.knn")
    try:
        tree = KdTree.from_points(SAMPLE_POINTS)
        nearest(tree, (0, 0), k=1)
    finally:
        kx_config.reset_runtime_config_cache()

    message = _op_messages(caplog, "nearest")[-1]
    assert "cpu_user_ms=NA" in message
    assert "rss_delta=NA" in message


def test_no_log_when_info_disabled(caplog: pytest.LogCaptureFixture) -> None:
    kx_config.reset_runtime_config_cache()
    tree = KdTree.from_points(SAMPLE_POINTS)
    caplog.set_level(logging.WARNING, logger="kdtreex.queries.knn")

    nearest(tree, (0, 0), k=1)

    assert not _op_messages(caplog, "nearest")


def test_log_operation_formats_metadata(caplog: pytest.LogCaptureFixture) -> None:
    kx_config.reset_runtime_config_cache()
    logger = get_logger("tests.diagnostics")
    caplog.set_level(logging.INFO, logger=logger.name)

    with log_operation(logger, "custom") as op_log:
        op_log.add_metadata(ratio=0.25, label="x")

    message = _op_messages(caplog, "custom")[-1]
    assert message.startswith("op=custom wall_ms=")
    assert message.endswith("ratio=0.250 label=x")


def test_log_operation_skips_log_when_block_raises(caplog: pytest.LogCaptureFixture) -> None:
    kx_config.reset_runtime_config_cache()
    logger = get_logger("tests.diagnostics")
    caplog.set_level(logging.INFO, logger=logger.name)

    with pytest.raises(RuntimeError):
        with log_operation(logger, "failing"):
            raise RuntimeError("boom")

    assert not _op_messages(caplog, "failing")


def test_operation_log_accumulates_metadata():
    op_log = OperationLog(name="demo")
    op_log.add_metadata(a=1)
    op_log.add_metadata(b=2, a=3)

    assert op_log.metadata == {"a": 3, "b": 2}


def test_resource_snapshot_respects_enabled_flag():
    disabled = ResourceSnapshot.capture(enabled=False)
    enabled = ResourceSnapshot.capture(enabled=True)

    assert disabled.cpu_user is None and disabled.rss is None
    assert enabled.cpu_user is not None and enabled.rss is not None
    assert enabled.rss > 0


def test_resources_not_sampled_when_info_disabled(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    kx_config.reset_runtime_config_cache()
    tree = KdTree.from_points(SAMPLE_POINTS)
    caplog.set_level(logging.WARNING, logger="kdtreex.queries.knn")
    calls: list = []
    original = ResourceSnapshot.capture.__func__

    def _counting_capture(cls, *, enabled: bool) -> ResourceSnapshot:
        calls.append(enabled)
        return original(cls, enabled=enabled)

    monkeypatch.setattr(ResourceSnapshot, "capture", classmethod(_counting_capture))

    nearest(tree, (0, 0), k=1)
    assert calls == []

    caplog.set_level(logging.INFO, logger="kdtreex.queries.knn")
    nearest(tree, (0, 0), k=1)
    assert len(calls) == 2
