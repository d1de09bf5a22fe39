"""Instruction-driven object reclaimer.

Reads a batch of deletion instructions, removes the objects addressed to
this storage node and accounts every removal in the usage ledger before
the object is unlinked.
"""

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from makogc.reclaim.ledger import UsageLedger
from makogc.reclaim.models import (
    LineOutcome,
    LineResult,
    ReclaimSummary,
    parse_instruction,
)

logger = logging.getLogger(__name__)


class ReclaimError(Exception):
    """Raised for faults that abort a batch run."""


class ObjectReclaimer:
    """Applies deletion instruction batches for one storage node.

    Attributes:
        store_root: Root directory of the object store.
        node_id: Storage node whose instructions are applied.
        ledger: Ledger receiving one record group per removed object.
        dry_run: If True, report without touching the ledger or the store.
    """

    def __init__(
        self,
        store_root: Path,
        node_id: str,
        ledger: UsageLedger,
        *,
        dry_run: bool = False,
    ) -> None:
        self.store_root = store_root
        self.node_id = node_id
        self.ledger = ledger
        self.dry_run = dry_run

    def run(self, batch_path: Path, starting_total: int) -> ReclaimSummary:
        """Process a batch file line by line, in file order.

        A missing batch file means there is nothing to do yet. Malformed
        lines are counted and skipped; they never stop the batch.

        Args:
            batch_path: Instruction batch to apply.
            starting_total: Cumulative logical bytes carried over from the
                previous run.

        Returns:
            ReclaimSummary with counters and the final cumulative total.

        Raises:
            ValueError: If starting_total is negative.
            ReclaimError: If the batch cannot be read or an object cannot
                be removed.
            LedgerError: If the ledger cannot be appended to.
        """
        if starting_total < 0:
            msg = f"Starting total must be non-negative, got {starting_total}"
            raise ValueError(msg)

        if not batch_path.exists():
            logger.info("Batch %s not present, nothing to do", batch_path)
            return ReclaimSummary(
                batch_found=False,
                starting_total=starting_total,
                total_logical_bytes=starting_total,
            )

        summary = ReclaimSummary(
            batch_found=True,
            starting_total=starting_total,
            total_logical_bytes=starting_total,
        )
        for line in self._read_batch(batch_path):
            summary.add(self.process_line(line, summary.total_logical_bytes))

        logger.info(
            "Batch %s done: %d instructions, %d deleted, %d missing, "
            "%d for other nodes, %d malformed, %d bytes reclaimed",
            batch_path,
            summary.instructions,
            summary.count(LineOutcome.DELETED),
            summary.count(LineOutcome.MISSING),
            summary.count(LineOutcome.MISDIRECTED),
            summary.count(LineOutcome.MALFORMED),
            summary.bytes_reclaimed,
        )
        return summary

    def process_line(self, line: str, running_total: int) -> LineResult:
        """Apply a single instruction line.

        The object size is best-effort: an object that vanishes before its
        size is read counts as 0 bytes, and any other lookup failure also
        counts as 0 but is flagged on the result.

        Args:
            line: Raw batch line.
            running_total: Cumulative logical bytes before this line.

        Returns:
            LineResult describing the outcome and the new running total.

        Raises:
            ReclaimError: If the object exists but cannot be removed.
            LedgerError: If the ledger cannot be appended to.
        """
        if not line.strip():
            return LineResult(LineOutcome.BLANK, 0, running_total)

        logger.debug("Processing %s", line.rstrip("\n"))

        instruction = parse_instruction(line)
        if instruction is None:
            logger.warning("Malformed instruction: %r", line.rstrip("\n"))
            return LineResult(LineOutcome.MALFORMED, 0, running_total)

        if instruction.node_id != self.node_id:
            return LineResult(LineOutcome.MISDIRECTED, 0, running_total)

        if not instruction.stays_under_root():
            logger.warning("Instruction leaves the store root: %r", line.rstrip("\n"))
            return LineResult(LineOutcome.MALFORMED, 0, running_total)

        path = instruction.object_path(self.store_root)
        if not os.path.lexists(path):
            logger.info("%s doesn't exist, so not removing", path)
            return LineResult(LineOutcome.MISSING, 0, running_total, path=path)

        size, size_error = self._object_size(path)
        total = running_total + size

        if self.dry_run:
            logger.info("Dry-run: would remove %s (%d bytes)", path, size)
            return LineResult(LineOutcome.DRY_RUN, size, total, path=path, size_error=size_error)

        # Account before unlinking so a crash never loses a completed calculation
        self.ledger.record(size, total)
        self._remove(path)
        logger.info("Removed %s (%d bytes)", path, size)

        return LineResult(LineOutcome.DELETED, size, total, path=path, size_error=size_error)

    def _object_size(self, path: Path) -> tuple[int, bool]:
        """Return (size, size_error) for an object."""
        try:
            return path.stat().st_size, False
        except FileNotFoundError:
            return 0, False
        except OSError as e:
            logger.warning("Cannot read size of %s, counting 0 bytes: %s", path, e)
            return 0, True

    def _remove(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            logger.info("%s was removed by another process", path)
        except OSError as e:
            raise ReclaimError(f"Couldn't remove {path}: {e}") from e

    def _read_batch(self, batch_path: Path) -> Iterator[str]:
        try:
            with batch_path.open(encoding="utf-8") as f:
                yield from f
        except (OSError, UnicodeDecodeError) as e:
            raise ReclaimError(f"Cannot read batch {batch_path}: {e}") from e
