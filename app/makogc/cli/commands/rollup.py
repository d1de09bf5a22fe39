"""Rollup command.

Walks the object store and writes per-account usage gauges to stdout in
the Prometheus text exposition format.
"""

from pathlib import Path
from typing import Annotated

import typer

from makogc.cli.types import get_config
from makogc.rollup.aggregator import RollupAggregator
from makogc.rollup.exposition import render_metrics


def rollup(
    ctx: typer.Context,
    store_root: Annotated[
        Path | None,
        typer.Option(
            "--store-root",
            help="Object store root (default from configuration).",
        ),
    ] = None,
) -> None:
    """Print account usage metrics for the object store."""
    config = get_config(ctx)

    aggregator = RollupAggregator(
        store_root or config.store_root,
        marker=config.versioned_marker,
    )
    result = aggregator.run()

    # Raw output; scrapers read it verbatim
    typer.echo(render_metrics(result), nl=False)
