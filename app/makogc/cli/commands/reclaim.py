"""Reclaim command.

Applies a deletion instruction batch to the local object store and
records the freed bytes in the ledger.

Exit codes: 0 when the batch is absent or fully applied, 1 when at least
one instruction was malformed (the batch is still applied), 2 on a
configuration or I/O fault.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from makogc.cli.types import EXIT_FATAL, get_config
from makogc.reclaim.ledger import LedgerError, UsageLedger
from makogc.reclaim.models import LineOutcome, ReclaimSummary
from makogc.reclaim.reclaimer import ObjectReclaimer, ReclaimError
from makogc.utils.formatting import (
    console,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)


def reclaim(
    ctx: typer.Context,
    batch: Annotated[
        Path,
        typer.Argument(help="Deletion instruction batch file."),
    ],
    node_id: Annotated[
        str,
        typer.Argument(help="Storage node id whose instructions are applied."),
    ],
    starting_total: Annotated[
        int,
        typer.Argument(
            min=0,
            help="Cumulative logical bytes deleted before this run.",
        ),
    ],
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be reclaimed."),
    ] = False,
) -> None:
    """Delete the objects named in an instruction batch for this node."""
    config = get_config(ctx)

    ledger = UsageLedger(config.ledger_path, config.program_name)
    reclaimer = ObjectReclaimer(config.store_root, node_id, ledger, dry_run=dry_run)

    try:
        summary = reclaimer.run(batch, starting_total)
    except (ReclaimError, LedgerError) as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=EXIT_FATAL) from e

    _print_summary(summary, batch, dry_run)

    if summary.exit_code:
        raise typer.Exit(code=summary.exit_code)


def _print_summary(summary: ReclaimSummary, batch: Path, dry_run: bool) -> None:
    """Display the outcome of a batch run."""
    if not summary.batch_found:
        print_info(f"No batch at {escape(str(batch))}, nothing to do.")
        return

    removed = summary.count(LineOutcome.DRY_RUN if dry_run else LineOutcome.DELETED)
    verb = "would remove" if dry_run else "removed"
    console.print(
        f"[dim]{summary.instructions} instructions: {verb} {removed}, "
        f"{summary.count(LineOutcome.MISSING)} already gone, "
        f"{summary.count(LineOutcome.MISDIRECTED)} for other nodes[/dim]"
    )

    if summary.size_errors:
        print_warning(f"{summary.size_errors} object size(s) could not be read and counted as 0.")

    malformed = summary.count(LineOutcome.MALFORMED)
    if malformed:
        print_warning(
            f"{malformed} malformed instruction(s) in {escape(str(batch))}; keep it for inspection."
        )

    print_success(
        f"Reclaimed {format_size(summary.bytes_reclaimed)}; "
        f"total logical bytes deleted: {summary.total_logical_bytes}"
    )
