"""CLI package for makogc.

This package contains the Typer application and all subcommands.
"""

from makogc.cli.main import app

__all__ = ["app"]
