"""Object reclamation module.

This module applies deletion instruction batches to the local object
store and keeps the append-only byte accounting ledger.
"""

from makogc.reclaim.ledger import LedgerError, LedgerMetric, LedgerRecord, UsageLedger
from makogc.reclaim.models import (
    DeletionInstruction,
    LineOutcome,
    LineResult,
    ReclaimStatus,
    ReclaimSummary,
    parse_instruction,
)
from makogc.reclaim.reclaimer import ObjectReclaimer, ReclaimError

__all__ = [
    "DeletionInstruction",
    "LedgerError",
    "LedgerMetric",
    "LedgerRecord",
    "LineOutcome",
    "LineResult",
    "ObjectReclaimer",
    "ReclaimError",
    "ReclaimStatus",
    "ReclaimSummary",
    "UsageLedger",
    "parse_instruction",
]
