from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict

_SUPPORTED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_DEFAULT_LOG_LEVEL = "WARNING"
_DEFAULT_METRIC = "euclidean"


def _bool_from_env(value: str | None, *, default: bool) -> bool:
    if value is None:
        return default
    value = value.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return default


def _normalise_log_level(value: str | None) -> str:
    if value is None or value.strip() == "":
        return _DEFAULT_LOG_LEVEL
    level = value.strip().upper()
    if level not in _SUPPORTED_LOG_LEVELS:
        raise ValueError(
            f"Unsupported log level '{value}'. Expected one of {sorted(_SUPPORTED_LOG_LEVELS)}."
        )
    return level


def _normalise_metric(value: str | None) -> str:
    if value is None:
        return _DEFAULT_METRIC
    return value.strip().lower() or _DEFAULT_METRIC


@dataclass(frozen=True)
class RuntimeConfig:
    log_level: str
    enable_diagnostics: bool
    metric: str
    check_invariants: bool
    exact_search: bool

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        return cls(
            log_level=_normalise_log_level(os.getenv("KDTREEX_LOG_LEVEL")),
            enable_diagnostics=_bool_from_env(
                os.getenv("KDTREEX_ENABLE_DIAGNOSTICS"), default=True
            ),
            metric=_normalise_metric(os.getenv("KDTREEX_METRIC")),
            check_invariants=_bool_from_env(
                os.getenv("KDTREEX_CHECK_INVARIANTS"), default=False
            ),
            exact_search=_bool_from_env(os.getenv("KDTREEX_EXACT_SEARCH"), default=False),
        )


def _configure_logging(level: str) -> None:
    logger = logging.getLogger("kdtreex")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        formatter = logging.Formatter("%(levelname)s %(name)s: %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)


@lru_cache(maxsize=None)
def runtime_config() -> RuntimeConfig:
    config = RuntimeConfig.from_env()
    _configure_logging(config.log_level)
    return config


def reset_runtime_config_cache() -> None:
    runtime_config.cache_clear()


def describe_runtime() -> Dict[str, Any]:
    """Return a serialisable view of the active runtime configuration."""

    config = runtime_config()
    return {
        "log_level": config.log_level,
        "enable_diagnostics": config.enable_diagnostics,
        "metric": config.metric,
        "check_invariants": config.check_invariants,
        "exact_search": config.exact_search,
    }


__all__ = [
    "RuntimeConfig",
    "describe_runtime",
    "reset_runtime_config_cache",
    "runtime_config",
]
