"""Reclaim domain models.

This module defines the deletion instruction read from a batch file,
the per-line outcomes of processing it, and the run summary that the
CLI translates into an exit status.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path

# <ignored> <node_id> <owner_id> <object_id> [extra fields ignored]
INSTRUCTION_FIELD_COUNT = 4

_UNSAFE_COMPONENTS = frozenset({".", ".."})


@dataclass(frozen=True, slots=True)
class DeletionInstruction:
    """One well-formed line of an instruction batch.

    Attributes:
        node_id: Storage node the instruction targets.
        owner_id: Owning account of the object.
        object_id: Object identifier within the owner's directory.
    """

    node_id: str
    owner_id: str
    object_id: str

    def object_path(self, store_root: Path) -> Path:
        """Compose the on-disk location <store_root>/<owner_id>/<object_id>."""
        return store_root / self.owner_id / self.object_id

    def stays_under_root(self) -> bool:
        """True if owner and object are each a single path component."""
        return _is_safe_component(self.owner_id) and _is_safe_component(self.object_id)


def _is_safe_component(value: str) -> bool:
    return "/" not in value and value not in _UNSAFE_COMPONENTS


def parse_instruction(line: str) -> DeletionInstruction | None:
    """Parse a batch line into a DeletionInstruction.

    Fields are whitespace separated; the first is ignored and anything
    past the fourth is ignored. Path safety is not checked here; lines
    for other nodes are never looked at beyond their node field.

    Args:
        line: Raw batch line.

    Returns:
        DeletionInstruction, or None if the line has too few fields.
    """
    fields = line.split()
    if len(fields) < INSTRUCTION_FIELD_COUNT:
        return None

    _, node_id, owner_id, object_id = fields[:INSTRUCTION_FIELD_COUNT]
    return DeletionInstruction(node_id=node_id, owner_id=owner_id, object_id=object_id)


class LineOutcome(str, Enum):
    """What happened to a single batch line.

    Attributes:
        DELETED: Object accounted in the ledger and removed.
        DRY_RUN: Object would have been accounted and removed.
        MALFORMED: Too few fields or an unsafe path component.
        MISDIRECTED: Instruction targets another storage node.
        MISSING: Object is already absent from disk.
        BLANK: Empty or whitespace-only line.
    """

    DELETED = "deleted"
    DRY_RUN = "dry_run"
    MALFORMED = "malformed"
    MISDIRECTED = "misdirected"
    MISSING = "missing"
    BLANK = "blank"


@dataclass(frozen=True, slots=True)
class LineResult:
    """Result of processing one batch line.

    Attributes:
        outcome: Classification of the line.
        logical_bytes: Bytes accounted for this line (0 unless deleted).
        total_logical_bytes: Running total after this line.
        path: Object path, when the line was well formed and addressed here.
        size_error: True if the size lookup failed for a reason other
            than the object being absent; the line then counts 0 bytes.
    """

    outcome: LineOutcome
    logical_bytes: int
    total_logical_bytes: int
    path: Path | None = None
    size_error: bool = False


class ReclaimStatus(IntEnum):
    """Summary status of a batch run, valued as its process exit code.

    Attributes:
        OK: Batch absent, or fully applied without malformed lines.
        MALFORMED: At least one malformed line; valid lines were applied.
    """

    OK = 0
    MALFORMED = 1


@dataclass(slots=True)
class ReclaimSummary:
    """Aggregated counters for one batch run.

    Attributes:
        batch_found: Whether the batch file existed.
        starting_total: Cumulative logical bytes supplied by the caller.
        total_logical_bytes: Cumulative logical bytes after the run.
        counts: Number of lines per outcome.
        size_errors: Lines whose size lookup failed unexpectedly.
    """

    batch_found: bool
    starting_total: int
    total_logical_bytes: int
    counts: dict[LineOutcome, int] = field(default_factory=dict)
    size_errors: int = 0

    def add(self, result: LineResult) -> None:
        """Fold a line result into the summary."""
        self.counts[result.outcome] = self.counts.get(result.outcome, 0) + 1
        self.total_logical_bytes = result.total_logical_bytes
        if result.size_error:
            self.size_errors += 1

    def count(self, outcome: LineOutcome) -> int:
        """Number of lines that ended with the given outcome."""
        return self.counts.get(outcome, 0)

    @property
    def instructions(self) -> int:
        """Non-blank lines seen."""
        return sum(n for o, n in self.counts.items() if o != LineOutcome.BLANK)

    @property
    def bytes_reclaimed(self) -> int:
        """Logical bytes accounted during this run."""
        return self.total_logical_bytes - self.starting_total

    @property
    def status(self) -> ReclaimStatus:
        if self.count(LineOutcome.MALFORMED):
            return ReclaimStatus.MALFORMED
        return ReclaimStatus.OK

    @property
    def exit_code(self) -> int:
        return int(self.status)
