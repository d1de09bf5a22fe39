"""Configuration commands.

Show the effective configuration or write a default configuration file.
"""

from typing import Annotated

import tomli_w
import typer
from rich.markup import escape

from makogc.cli.types import EXIT_FATAL, get_config
from makogc.core.config import ConfigError, GcConfig, save_config
from makogc.core.paths import get_config_path
from makogc.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or initialize configuration.",
    no_args_is_help=True,
)


@app.command()
def show(ctx: typer.Context) -> None:
    """Show the effective configuration, environment overrides included."""
    config = get_config(ctx)
    console.print(tomli_w.dumps(config.model_dump(mode="json")), markup=False, highlight=False)


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing file."),
    ] = False,
) -> None:
    """Write a configuration file with the default settings."""
    path = (ctx.obj or {}).get("config_path") or get_config_path()

    if path.exists() and not force:
        print_info(f"Config already exists at {escape(str(path))} (use --force to overwrite).")
        raise typer.Exit(code=0)

    try:
        saved = save_config(GcConfig(), path)
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=EXIT_FATAL) from e

    print_success(f"Wrote default configuration to {escape(str(saved))}")
