"""Append-only byte accounting ledger.

Each reclaimed object produces a group of four text lines:

    <unix_seconds>: <program> (<pid>) current logical bytes processed: <n>
    <unix_seconds>: <program> (<pid>) total logical bytes deleted: <n>
    <unix_seconds>: <program> (<pid>) current physical bytes processed: 0
    <unix_seconds>: <program> (<pid>) total physical bytes deleted: 0

The file is shared by every reclaimer on the host. A group is emitted
with a single write() on a file opened for append, but readers still
parse every line on its own and never assume four-line alignment.

Older writers on the same host stamp lines with an ISO 8601 time and put
a colon after the pid:

    2019-01-01T00:00:00.000Z: mako_gc.sh (<pid>): total logical bytes deleted: <n>

Both forms are read back; only the first is written.
"""

import datetime
import logging
import os
import re
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Raised when the ledger cannot be written or read."""


class LedgerMetric(str, Enum):
    """Metric label carried by a ledger line."""

    CURRENT_LOGICAL = "current logical bytes processed"
    TOTAL_LOGICAL = "total logical bytes deleted"
    CURRENT_PHYSICAL = "current physical bytes processed"
    TOTAL_PHYSICAL = "total physical bytes deleted"


_LINE_PATTERN = re.compile(
    r"^(?P<timestamp>\S+): (?P<program>\S+) \((?P<pid>\d+)\):? "
    r"(?P<metric>[a-z ]+): (?P<value>\d+)$"
)


@dataclass(frozen=True, slots=True)
class LedgerRecord:
    """A single ledger line.

    Attributes:
        timestamp: Time token as written, UNIX seconds or ISO 8601.
        program: Program tag of the writer.
        pid: Process id of the writer.
        metric: Which counter the line reports.
        value: Counter value in bytes.
    """

    timestamp: str
    program: str
    pid: int
    metric: LedgerMetric
    value: int

    @property
    def when(self) -> datetime.datetime | None:
        """The timestamp as an aware UTC datetime, None if unreadable."""
        if self.timestamp.isdigit():
            return datetime.datetime.fromtimestamp(int(self.timestamp), tz=datetime.UTC)
        try:
            parsed = datetime.datetime.fromisoformat(self.timestamp)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=datetime.UTC)
        return parsed.astimezone(datetime.UTC)

    def to_line(self) -> str:
        """Serialize to a newline-terminated ledger line."""
        return f"{self.timestamp}: {self.program} ({self.pid}) {self.metric.value}: {self.value}\n"

    @classmethod
    def from_line(cls, line: str) -> "LedgerRecord":
        """Parse a ledger line.

        Raises:
            ValueError: If the line is not a ledger record.
        """
        match = _LINE_PATTERN.match(line.rstrip("\n"))
        if match is None:
            msg = f"Not a ledger record: {line!r}"
            raise ValueError(msg)
        return cls(
            timestamp=match["timestamp"],
            program=match["program"],
            pid=int(match["pid"]),
            metric=LedgerMetric(match["metric"]),
            value=int(match["value"]),
        )


class UsageLedger:
    """Writes and reads the byte accounting ledger.

    Nothing is opened until the first record, so a run with no work never
    creates the file. The parent directory is never created.

    Attributes:
        path: Ledger file location.
        program_name: Tag written into every line.
    """

    def __init__(
        self,
        path: Path,
        program_name: str,
        *,
        pid: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.path = path
        self.program_name = program_name
        self._pid = pid if pid is not None else os.getpid()
        self._clock = clock

    def build_group(self, current_logical_bytes: int, total_logical_bytes: int) -> list[LedgerRecord]:
        """Build the four records for one reclaimed object, in ledger order.

        Physical byte accounting is not implemented; both physical
        counters are always written as 0.
        """
        timestamp = str(int(self._clock()))
        values = (
            (LedgerMetric.CURRENT_LOGICAL, current_logical_bytes),
            (LedgerMetric.TOTAL_LOGICAL, total_logical_bytes),
            (LedgerMetric.CURRENT_PHYSICAL, 0),
            (LedgerMetric.TOTAL_PHYSICAL, 0),
        )
        return [
            LedgerRecord(
                timestamp=timestamp,
                program=self.program_name,
                pid=self._pid,
                metric=metric,
                value=value,
            )
            for metric, value in values
        ]

    def record(self, current_logical_bytes: int, total_logical_bytes: int) -> None:
        """Append the record group for one reclaimed object.

        Args:
            current_logical_bytes: Bytes freed by this object.
            total_logical_bytes: Cumulative bytes freed including this object.

        Raises:
            LedgerError: If the ledger cannot be appended to.
        """
        payload = "".join(
            r.to_line() for r in self.build_group(current_logical_bytes, total_logical_bytes)
        )
        try:
            with self.path.open(mode="a", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
        except OSError as e:
            raise LedgerError(f"Cannot append to ledger {self.path}: {e}") from e

    def iter_records(self) -> Iterator[LedgerRecord]:
        """Yield records in file order, skipping lines that don't parse.

        Raises:
            LedgerError: If the ledger exists but cannot be read.
        """
        if not self.path.exists():
            return

        try:
            with self.path.open(encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    if not line.strip():
                        continue
                    try:
                        yield LedgerRecord.from_line(line)
                    except ValueError:
                        logger.warning("Skipping unparseable ledger line %d", line_num)
        except OSError as e:
            raise LedgerError(f"Cannot read ledger {self.path}: {e}") from e

    def read_records(self, limit: int | None = None) -> list[LedgerRecord]:
        """Read ledger records, newest first.

        Args:
            limit: Maximum number of records to return. If None, returns all.
        """
        records = list(self.iter_records())
        records.reverse()
        if limit is not None:
            return records[:limit]
        return records

    def last_total_logical_bytes(self) -> int:
        """Most recent cumulative logical byte count, 0 if none recorded.

        This is the value a caller passes as the next run's starting total.
        """
        last = 0
        for record in self.iter_records():
            if record.metric is LedgerMetric.TOTAL_LOGICAL:
                last = record.value
        return last
