"""Ledger commands.

Inspect the byte accounting ledger written by the reclaimer.
"""

from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from makogc.cli.types import EXIT_FATAL, get_config
from makogc.reclaim.ledger import LedgerError, LedgerRecord, UsageLedger
from makogc.utils.formatting import console, print_error, print_info

app = typer.Typer(
    help="Inspect the byte accounting ledger.",
    no_args_is_help=True,
)


def _open_ledger(ctx: typer.Context) -> UsageLedger:
    config = get_config(ctx)
    return UsageLedger(config.ledger_path, config.program_name)


@app.command()
def total(ctx: typer.Context) -> None:
    """Print the last cumulative logical byte count.

    Pass the value as the starting total of the next reclaim run.
    """
    ledger = _open_ledger(ctx)
    try:
        value = ledger.last_total_logical_bytes()
    except LedgerError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=EXIT_FATAL) from e
    typer.echo(str(value))


@app.command()
def show(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            min=1,
            help="Maximum number of records to show.",
        ),
    ] = 20,
) -> None:
    """Show the most recent ledger records."""
    ledger = _open_ledger(ctx)
    try:
        records = ledger.read_records(limit=limit)
    except LedgerError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=EXIT_FATAL) from e

    if not records:
        print_info(f"No records in {escape(str(ledger.path))}.")
        return

    _print_table(records)


def _print_table(records: list[LedgerRecord]) -> None:
    table = Table(title="Ledger Records (newest first)", show_lines=False)
    table.add_column("Time", style="dim")
    table.add_column("Program")
    table.add_column("PID", justify="right")
    table.add_column("Metric", style="bold")
    table.add_column("Bytes", justify="right", style="bytes")

    for r in records:
        when = r.when
        table.add_row(
            when.strftime("%Y-%m-%d %H:%M:%S") if when else r.timestamp,
            r.program,
            str(r.pid),
            r.metric.value,
            str(r.value),
        )

    console.print(table)
