from __future__ import annotations

import os
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from numpy.random import default_rng
import typer
from typing_extensions import Annotated

from kdtreex import config as kx_config
from kdtreex.core.metrics import available_metrics

from .baselines import run_baseline_comparisons
from .benchmark import benchmark_knn_latency, gaussian_points


@dataclass
class QueryCLIOptions:
    dimension: int = 3
    tree_points: int = 8_192
    queries: int = 1_024
    k: int = 8
    radius: float | None = None
    seed: int = 0
    metric: str = "euclidean"
    exact: bool | None = None
    diagnostics: bool | None = None
    log_level: str | None = None
    baseline: str = "none"


app = typer.Typer(
    add_completion=False,
    pretty_exceptions_enable=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
    help="Benchmark k-nearest and radius queries against the kdtreex k-d tree.",
)

_SHAPE_PANEL = "Benchmark shape"
_RUNTIME_PANEL = "Runtime controls"
_BASELINE_PANEL = "Baselines"
_BASELINE_MODES = ("none", "brute-force")


@app.callback(invoke_without_command=True)
def cli(
    ctx: typer.Context,
    dimension: Annotated[
        int,
        typer.Option(
            "--dimension",
            help="Dimensionality of tree/query points.",
            rich_help_panel=_SHAPE_PANEL,
        ),
    ] = 3,
    tree_points: Annotated[
        int,
        typer.Option(
            "--tree-points",
            help="Number of points indexed before querying.",
            rich_help_panel=_SHAPE_PANEL,
        ),
    ] = 8_192,
    queries: Annotated[
        int,
        typer.Option(
            "--queries",
            help="Number of query points per run.",
            rich_help_panel=_SHAPE_PANEL,
        ),
    ] = 1_024,
    k: Annotated[
        int,
        typer.Option(
            "--k",
            help="Number of neighbours requested per query.",
            rich_help_panel=_SHAPE_PANEL,
        ),
    ] = 8,
    radius: Annotated[
        Optional[float],
        typer.Option(
            "--radius",
            help="Only return neighbours strictly inside this radius.",
            rich_help_panel=_SHAPE_PANEL,
        ),
    ] = None,
    seed: Annotated[
        int,
        typer.Option(
            "--seed",
            help="Base random seed for point/query generation.",
            rich_help_panel=_SHAPE_PANEL,
        ),
    ] = 0,
    metric: Annotated[
        str,
        typer.Option(
            "--metric",
            case_sensitive=False,
            help="Registered distance metric (euclidean, manhattan, chebyshev).",
            rich_help_panel=_RUNTIME_PANEL,
        ),
    ] = "euclidean",
    exact: Annotated[
        Optional[bool],
        typer.Option(
            "--exact/--heuristic",
            help="Backtracking guard (default: runtime config).",
            rich_help_panel=_RUNTIME_PANEL,
        ),
    ] = None,
    diagnostics: Annotated[
        Optional[bool],
        typer.Option(
            "--enable-diagnostics/--disable-diagnostics",
            help="Control resource polling + diagnostic logging.",
            rich_help_panel=_RUNTIME_PANEL,
        ),
    ] = None,
    log_level: Annotated[
        Optional[str],
        typer.Option(
            "--log-level",
            help="Override runtime log level.",
            rich_help_panel=_RUNTIME_PANEL,
        ),
    ] = None,
    baseline: Annotated[
        str,
        typer.Option(
            "--baseline",
            help="Baseline to compare against (none, brute-force); reports recall.",
            rich_help_panel=_BASELINE_PANEL,
        ),
    ] = "none",
) -> None:
    options = QueryCLIOptions(
        dimension=dimension,
        tree_points=tree_points,
        queries=queries,
        k=k,
        radius=radius,
        seed=seed,
        metric=metric.lower(),
        exact=exact,
        diagnostics=diagnostics,
        log_level=log_level,
        baseline=baseline,
    )
    ctx.obj = options
    if ctx.invoked_subcommand is None:
        run_queries(options)


@contextmanager
def _runtime_overrides(options: QueryCLIOptions) -> Iterator[None]:
    overrides: dict[str, str] = {}
    if options.diagnostics is not None:
        overrides["KDTREEX_ENABLE_DIAGNOSTICS"] = "1" if options.diagnostics else "0"
    if options.log_level is not None:
        overrides["KDTREEX_LOG_LEVEL"] = options.log_level
    previous = {key: os.environ.get(key) for key in overrides}
    os.environ.update(overrides)
    kx_config.reset_runtime_config_cache()
    try:
        yield
    finally:
        for key, value in previous.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        kx_config.reset_runtime_config_cache()


def run_queries(options: QueryCLIOptions) -> None:
    args = options
    if args.metric not in available_metrics():
        raise typer.BadParameter(
            f"unknown metric '{args.metric}'; expected one of {', '.join(available_metrics())}",
            param_hint="--metric",
        )
    if args.radius is not None and args.radius <= 0:
        raise typer.BadParameter("radius must be positive", param_hint="--radius")
    if args.baseline not in _BASELINE_MODES:
        raise typer.BadParameter(
            f"unknown baseline '{args.baseline}'; expected one of {', '.join(_BASELINE_MODES)}",
            param_hint="--baseline",
        )

    with _runtime_overrides(args):
        runtime = kx_config.runtime_config()
        exact = runtime.exact_search if args.exact is None else args.exact
        print(
            f"[queries] metric={args.metric} exact={exact} "
            f"diagnostics={runtime.enable_diagnostics} log_level={runtime.log_level}"
        )

        points_np = gaussian_points(default_rng(args.seed), args.tree_points, args.dimension)
        queries_np = gaussian_points(default_rng(args.seed + 1), args.queries, args.dimension)

        tree, result, tree_results = benchmark_knn_latency(
            points_np,
            queries_np,
            k=args.k,
            radius=args.radius,
            metric=args.metric,
            exact=exact,
        )

        print(
            f"kdtree | build={result.build_seconds:.4f}s height={tree.height()} "
            f"queries={result.queries} k={result.k} "
            f"time={result.elapsed_seconds:.4f}s "
            f"latency={result.latency_ms:.4f}ms "
            f"throughput={result.queries_per_second:,.1f} q/s "
            f"mean_results={result.mean_results:.2f}"
        )

        for baseline in run_baseline_comparisons(
            points_np,
            queries_np,
            k=args.k,
            radius=args.radius,
            metric=args.metric,
            tree_results=tree_results,
            mode=args.baseline,
        ):
            slowdown = (
                baseline.latency_ms / result.latency_ms if result.latency_ms else float("inf")
            )
            print(
                f"baseline[{baseline.name}] | build={baseline.build_seconds:.4f}s "
                f"time={baseline.elapsed_seconds:.4f}s "
                f"latency={baseline.latency_ms:.4f}ms "
                f"throughput={baseline.queries_per_second:,.1f} q/s "
                f"slowdown={slowdown:.3f}x recall={baseline.recall:.4f}"
            )


def main() -> None:
    app()


__all__ = ["QueryCLIOptions", "app", "main", "run_queries"]
