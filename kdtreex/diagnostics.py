"""Per-operation resource logging."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator

import psutil

from kdtreex import config as kx_config


@dataclass
class ResourceSnapshot:
    wall: float
    cpu_user: float | None = None
    rss: int | None = None

    @classmethod
    def capture(cls, *, enabled: bool) -> "ResourceSnapshot":
        wall = time.perf_counter()
        if not enabled:
            return cls(wall=wall)
        process = psutil.Process()
        return cls(
            wall=wall,
            cpu_user=float(process.cpu_times().user),
            rss=int(process.memory_info().rss),
        )


@dataclass
class OperationLog:
    """Mutable record filled in while an operation runs."""

    name: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_metadata(self, **values: Any) -> None:
        self.metadata.update(values)


def _format_value(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.3f}"
    return str(value)


def _format_message(op_log: OperationLog, start: ResourceSnapshot, end: ResourceSnapshot) -> str:
    wall_ms = (end.wall - start.wall) * 1e3
    if start.cpu_user is not None and end.cpu_user is not None:
        cpu_user_ms = f"{(end.cpu_user - start.cpu_user) * 1e3:.3f}"
    else:
        cpu_user_ms = "NA"
    if start.rss is not None and end.rss is not None:
        rss_delta = str(end.rss - start.rss)
    else:
        rss_delta = "NA"
    parts = [
        f"op={op_log.name}",
        f"wall_ms={wall_ms:.3f}",
        f"cpu_user_ms={cpu_user_ms}",
        f"rss_delta={rss_delta}",
    ]
    parts.extend(f"{key}={_format_value(value)}" for key, value in op_log.metadata.items())
    return " ".join(parts)


@contextmanager
def log_operation(logger: logging.Logger, name: str) -> Iterator[OperationLog]:
    """Time the enclosed block and emit one INFO line when it completes."""

    enabled = kx_config.runtime_config().enable_diagnostics
    op_log = OperationLog(name=name)
    if not logger.isEnabledFor(logging.INFO):
        yield op_log
        return
    start = ResourceSnapshot.capture(enabled=enabled)
    yield op_log
    end = ResourceSnapshot.capture(enabled=enabled)
    logger.info(_format_message(op_log, start, end))


__all__ = ["OperationLog", "ResourceSnapshot", "log_operation"]
