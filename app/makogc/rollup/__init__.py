"""Capacity rollup module.

This module walks the object store, attributes files to accounts and
renders per-account usage as Prometheus gauges.
"""

from makogc.rollup.aggregator import RollupAggregator
from makogc.rollup.classifier import PathClassificationError, classify_path
from makogc.rollup.exposition import render_metrics
from makogc.rollup.models import AccountUsage, RollupResult

__all__ = [
    "AccountUsage",
    "PathClassificationError",
    "RollupAggregator",
    "RollupResult",
    "classify_path",
    "render_metrics",
]
