"""Unit tests for ObjectReclaimer.

Tests batch processing, node filtering, malformed lines, ledger
accounting order, and fault handling.
"""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest
from makogc.reclaim.ledger import LedgerError, LedgerMetric, UsageLedger
from makogc.reclaim.models import LineOutcome, ReclaimStatus
from makogc.reclaim.reclaimer import ObjectReclaimer, ReclaimError

NODE = "1.stor.example.com"
OTHER_NODE = "2.stor.example.com"
OWNER = "0b4e2f9a-1c3d-4e5f-8a9b-0c1d2e3f4a5b"


@pytest.fixture
def ledger(ledger_path: Path) -> UsageLedger:
    return UsageLedger(ledger_path, "mako_gc.sh", pid=100, clock=lambda: 1700000000.0)


@pytest.fixture
def reclaimer(store_root: Path, ledger: UsageLedger) -> ObjectReclaimer:
    return ObjectReclaimer(store_root, NODE, ledger)


def _write_batch(path: Path, *lines: str) -> Path:
    path.write_text("".join(line + "\n" for line in lines))
    return path


def _totals(ledger: UsageLedger) -> list[int]:
    return [r.value for r in ledger.iter_records() if r.metric is LedgerMetric.TOTAL_LOGICAL]


class TestRun:
    """Tests for ObjectReclaimer.run."""

    def test_missing_batch_is_success(
        self, reclaimer: ObjectReclaimer, tmp_path: Path, ledger_path: Path
    ) -> None:
        """A missing batch does nothing and never creates the ledger."""
        summary = reclaimer.run(tmp_path / "no-such-batch", 5)

        assert summary.batch_found is False
        assert summary.exit_code == 0
        assert summary.total_logical_bytes == 5
        assert not ledger_path.exists()

    def test_deletes_and_accounts(
        self,
        reclaimer: ObjectReclaimer,
        ledger: UsageLedger,
        make_object: Callable[..., Path],
        tmp_path: Path,
    ) -> None:
        """Sizes 10 and 20 on top of 5 end at a cumulative 35."""
        a = make_object(OWNER, "obj-a", size=10)
        b = make_object(OWNER, "obj-b", size=20)
        batch = _write_batch(
            tmp_path / "batch",
            f"mako {NODE} {OWNER} obj-a",
            f"mako {NODE} {OWNER} obj-b",
        )

        summary = reclaimer.run(batch, 5)

        assert summary.status is ReclaimStatus.OK
        assert summary.total_logical_bytes == 35
        assert summary.bytes_reclaimed == 30
        assert summary.count(LineOutcome.DELETED) == 2
        assert not a.exists()
        assert not b.exists()
        assert _totals(ledger) == [15, 35]

    def test_other_nodes_untouched(
        self,
        reclaimer: ObjectReclaimer,
        make_object: Callable[..., Path],
        tmp_path: Path,
        ledger_path: Path,
    ) -> None:
        """Instructions for other nodes are skipped silently."""
        obj = make_object(OWNER, "obj", size=3)
        batch = _write_batch(
            tmp_path / "batch",
            f"mako {OTHER_NODE} {OWNER} obj",
            f"mako {OTHER_NODE} {OWNER} obj",
        )

        summary = reclaimer.run(batch, 0)

        assert summary.exit_code == 0
        assert summary.count(LineOutcome.MISDIRECTED) == 2
        assert obj.exists()
        assert not ledger_path.exists()

    def test_malformed_lines_do_not_stop_batch(
        self,
        reclaimer: ObjectReclaimer,
        make_object: Callable[..., Path],
        tmp_path: Path,
    ) -> None:
        """Malformed lines set status 1; valid lines are still applied."""
        first = make_object(OWNER, "first", size=1)
        last = make_object(OWNER, "last", size=2)
        batch = _write_batch(
            tmp_path / "batch",
            f"mako {NODE} {OWNER} first",
            f"mako {NODE}",
            f"mako {NODE} {OWNER} last",
        )

        summary = reclaimer.run(batch, 0)

        assert summary.status is ReclaimStatus.MALFORMED
        assert summary.exit_code == 1
        assert summary.count(LineOutcome.MALFORMED) == 1
        assert not first.exists()
        assert not last.exists()

    def test_second_run_is_idempotent(
        self,
        reclaimer: ObjectReclaimer,
        ledger: UsageLedger,
        make_object: Callable[..., Path],
        tmp_path: Path,
    ) -> None:
        """Re-running a batch adds no ledger records and exits 0."""
        make_object(OWNER, "obj", size=8)
        batch = _write_batch(tmp_path / "batch", f"mako {NODE} {OWNER} obj")

        first = reclaimer.run(batch, 0)
        records_after_first = len(list(ledger.iter_records()))
        second = reclaimer.run(batch, first.total_logical_bytes)

        assert second.exit_code == 0
        assert second.bytes_reclaimed == 0
        assert second.total_logical_bytes == 8
        assert second.count(LineOutcome.MISSING) == 1
        assert len(list(ledger.iter_records())) == records_after_first

    def test_blank_lines_ignored(self, reclaimer: ObjectReclaimer, tmp_path: Path) -> None:
        """Blank lines are neither instructions nor malformed."""
        batch = _write_batch(tmp_path / "batch", "", "   ")

        summary = reclaimer.run(batch, 0)

        assert summary.exit_code == 0
        assert summary.instructions == 0

    def test_negative_starting_total(self, reclaimer: ObjectReclaimer, tmp_path: Path) -> None:
        """A negative starting total is rejected before any work."""
        with pytest.raises(ValueError, match="non-negative"):
            reclaimer.run(tmp_path / "batch", -1)

    def test_unreadable_batch(self, reclaimer: ObjectReclaimer, tmp_path: Path) -> None:
        """A batch that exists but cannot be read aborts the run."""
        batch_dir = tmp_path / "batch-dir"
        batch_dir.mkdir()

        with pytest.raises(ReclaimError, match="Cannot read batch"):
            reclaimer.run(batch_dir, 0)

    def test_unwritable_ledger_aborts_before_delete(
        self,
        store_root: Path,
        make_object: Callable[..., Path],
        tmp_path: Path,
    ) -> None:
        """Ledger failure is fatal and the object is kept."""
        obj = make_object(OWNER, "obj", size=4)
        ledger = UsageLedger(tmp_path / "missing-dir" / "ledger", "mako_gc.sh")
        reclaimer = ObjectReclaimer(store_root, NODE, ledger)
        batch = _write_batch(tmp_path / "batch", f"mako {NODE} {OWNER} obj")

        with pytest.raises(LedgerError):
            reclaimer.run(batch, 0)

        assert obj.exists()

    def test_dry_run_changes_nothing(
        self,
        store_root: Path,
        ledger: UsageLedger,
        ledger_path: Path,
        make_object: Callable[..., Path],
        tmp_path: Path,
    ) -> None:
        """Dry-run reports bytes without touching ledger or store."""
        obj = make_object(OWNER, "obj", size=6)
        reclaimer = ObjectReclaimer(store_root, NODE, ledger, dry_run=True)
        batch = _write_batch(tmp_path / "batch", f"mako {NODE} {OWNER} obj")

        summary = reclaimer.run(batch, 1)

        assert summary.count(LineOutcome.DRY_RUN) == 1
        assert summary.total_logical_bytes == 7
        assert obj.exists()
        assert not ledger_path.exists()


class TestProcessLine:
    """Tests for ObjectReclaimer.process_line."""

    def test_ledger_written_before_delete(
        self,
        reclaimer: ObjectReclaimer,
        make_object: Callable[..., Path],
    ) -> None:
        """The record group is appended while the object still exists."""
        obj = make_object(OWNER, "obj", size=5)
        seen: list[bool] = []

        def _record(current: int, total: int) -> None:
            seen.append(obj.exists())

        with patch.object(reclaimer.ledger, "record", side_effect=_record) as mock_record:
            result = reclaimer.process_line(f"mako {NODE} {OWNER} obj", 10)

        mock_record.assert_called_once_with(5, 15)
        assert seen == [True]
        assert result.outcome is LineOutcome.DELETED
        assert not obj.exists()

    def test_size_error_counts_zero(
        self,
        reclaimer: ObjectReclaimer,
        make_object: Callable[..., Path],
    ) -> None:
        """A failed size lookup counts 0 bytes and is flagged."""
        obj = make_object(OWNER, "obj", size=5)

        with patch.object(Path, "stat", side_effect=PermissionError("denied")):
            result = reclaimer.process_line(f"mako {NODE} {OWNER} obj", 3)

        assert result.outcome is LineOutcome.DELETED
        assert result.logical_bytes == 0
        assert result.total_logical_bytes == 3
        assert result.size_error is True
        assert not obj.exists()

    def test_object_vanishing_before_stat(
        self,
        reclaimer: ObjectReclaimer,
        make_object: Callable[..., Path],
    ) -> None:
        """An object removed between existence check and stat is 0 bytes, no error."""
        make_object(OWNER, "obj", size=5)

        with patch.object(Path, "stat", side_effect=FileNotFoundError("gone")):
            result = reclaimer.process_line(f"mako {NODE} {OWNER} obj", 0)

        assert result.logical_bytes == 0
        assert result.size_error is False

    def test_delete_race_tolerated(
        self,
        reclaimer: ObjectReclaimer,
        make_object: Callable[..., Path],
    ) -> None:
        """Losing the unlink race to another deleter is not an error."""
        make_object(OWNER, "obj", size=2)

        with patch.object(Path, "unlink", side_effect=FileNotFoundError("gone")):
            result = reclaimer.process_line(f"mako {NODE} {OWNER} obj", 0)

        assert result.outcome is LineOutcome.DELETED

    def test_delete_failure_is_fatal(
        self,
        reclaimer: ObjectReclaimer,
        make_object: Callable[..., Path],
    ) -> None:
        """Any other unlink failure raises ReclaimError."""
        make_object(OWNER, "obj", size=2)

        with (
            patch.object(Path, "unlink", side_effect=PermissionError("denied")),
            pytest.raises(ReclaimError, match="Couldn't remove"),
        ):
            reclaimer.process_line(f"mako {NODE} {OWNER} obj", 0)

    def test_missing_object(self, reclaimer: ObjectReclaimer, store_root: Path) -> None:
        """An absent object is skipped as MISSING."""
        result = reclaimer.process_line(f"mako {NODE} {OWNER} nope", 9)

        assert result.outcome is LineOutcome.MISSING
        assert result.total_logical_bytes == 9
        assert result.path == store_root / OWNER / "nope"

    def test_path_escape_is_malformed(self, reclaimer: ObjectReclaimer) -> None:
        """Owner or object fields that leave the store root are malformed."""
        result = reclaimer.process_line(f"mako {NODE} .. etc", 0)

        assert result.outcome is LineOutcome.MALFORMED

    def test_unsafe_line_for_other_node_is_misdirected(self, reclaimer: ObjectReclaimer) -> None:
        """Lines for other nodes are skipped before any path check."""
        result = reclaimer.process_line(f"mako {OTHER_NODE} .. foo", 0)

        assert result.outcome is LineOutcome.MISDIRECTED

    def test_batch_for_other_nodes_exits_zero(
        self, reclaimer: ObjectReclaimer, tmp_path: Path, ledger_path: Path
    ) -> None:
        """A batch entirely for other nodes deletes nothing and exits 0."""
        batch = _write_batch(
            tmp_path / "batch",
            f"mako {OTHER_NODE} .. foo",
            f"mako {OTHER_NODE} {OWNER} a/b",
        )

        summary = reclaimer.run(batch, 0)

        assert summary.exit_code == 0
        assert summary.count(LineOutcome.MALFORMED) == 0
        assert summary.count(LineOutcome.MISDIRECTED) == 2
        assert not ledger_path.exists()
