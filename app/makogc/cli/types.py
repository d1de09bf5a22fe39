"""Shared types and utilities for CLI commands.

This module provides the exit codes and the configuration helper used
across multiple CLI command modules.
"""

from pathlib import Path

import typer
from rich.markup import escape

from makogc.core.config import ConfigError, GcConfig, load_config
from makogc.utils.formatting import print_error

EXIT_OK = 0
# Batch applied, but at least one instruction was malformed
EXIT_MALFORMED = 1
# Configuration or I/O fault; nothing after the fault was applied
EXIT_FATAL = 2


def get_config(ctx: typer.Context) -> GcConfig:
    """Load the effective configuration for a command.

    Uses the --config path stored on the root context, if any.

    Raises:
        typer.Exit: With EXIT_FATAL if the configuration is invalid.
    """
    config_path: Path | None = None
    if ctx.obj:
        config_path = ctx.obj.get("config_path")

    try:
        return load_config(config_path)
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=EXIT_FATAL) from e
