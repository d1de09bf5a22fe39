"""CLI commands for makogc.

This package contains all subcommand implementations.
"""

from makogc.cli.commands import config, ledger, reclaim, rollup

__all__ = ["config", "ledger", "reclaim", "rollup"]
