"""Rollup data models."""

from dataclasses import dataclass, field


@dataclass(slots=True)
class AccountUsage:
    """Bytes and object count attributed to one account.

    Attributes:
        bytes: Sum of regular file sizes.
        objects: Number of regular files.
    """

    bytes: int = 0
    objects: int = 0

    def add(self, size: int, objects: int = 1) -> None:
        """Merge a discovered file (or a partial tally) into this entry."""
        self.bytes += size
        self.objects += objects


@dataclass(frozen=True, slots=True)
class RollupResult:
    """Outcome of one full walk of the object store.

    Attributes:
        accounts: Usage per account identifier.
        duration_seconds: Wall-clock duration of the walk.
        completed_at: UNIX time the walk finished.
        skipped_entries: Entries that vanished or could not be read mid-walk.
        unclassified_files: Regular files with no owning account.
    """

    accounts: dict[str, AccountUsage] = field(default_factory=dict)
    duration_seconds: float = 0.0
    completed_at: float = 0.0
    skipped_entries: int = 0
    unclassified_files: int = 0

    @property
    def total_bytes(self) -> int:
        return sum(u.bytes for u in self.accounts.values())

    @property
    def total_objects(self) -> int:
        return sum(u.objects for u in self.accounts.values())
