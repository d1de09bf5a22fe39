"""Per-account capacity rollup of the object store.

Walks the whole store root, attributes every regular file to its account
and tallies bytes and object counts. Each run is a fresh recomputation;
nothing is carried between runs.
"""

import logging
import os
import stat
import time
from collections.abc import Callable
from pathlib import Path

from makogc.core.paths import VERSIONED_LAYOUT_MARKER
from makogc.rollup.classifier import PathClassificationError, classify_path
from makogc.rollup.models import AccountUsage, RollupResult

logger = logging.getLogger(__name__)


class RollupAggregator:
    """Computes account usage for a store root.

    The walk is a best-effort snapshot. Entries removed by a concurrent
    reclaimer between listing and stat are skipped and counted, never
    fatal.

    Args:
        store_root: Root directory of the object store.
        marker: First component that identifies the versioned layout.
        clock: Wall-clock source for the completion timestamp.
        timer: Monotonic source for the walk duration.
    """

    def __init__(
        self,
        store_root: Path,
        *,
        marker: str = VERSIONED_LAYOUT_MARKER,
        clock: Callable[[], float] = time.time,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store_root = store_root
        self._marker = marker
        self._clock = clock
        self._timer = timer

    def run(self) -> RollupResult:
        """Walk the store root and return per-account usage."""
        start = self._timer()
        accounts: dict[str, AccountUsage] = {}
        skipped = 0
        unclassified = 0

        if not self.store_root.is_dir():
            logger.warning("Object store root %s is not a directory", self.store_root)

        def _on_walk_error(error: OSError) -> None:
            nonlocal skipped
            # The root itself missing is reported above, not a skip
            if error.filename != str(self.store_root):
                logger.info("Skipping unreadable directory: %s", error)
                skipped += 1

        for dirpath, _dirnames, filenames in os.walk(self.store_root, onerror=_on_walk_error):
            for name in filenames:
                path = os.path.join(dirpath, name)
                try:
                    st = os.lstat(path)
                except FileNotFoundError:
                    logger.debug("%s vanished during the walk", path)
                    skipped += 1
                    continue
                except OSError as e:
                    logger.warning("Cannot stat %s: %s", path, e)
                    skipped += 1
                    continue

                # Symlinks and special files carry no accounting weight
                if not stat.S_ISREG(st.st_mode):
                    continue

                try:
                    account = classify_path(path, self.store_root, self._marker)
                except PathClassificationError as e:
                    logger.warning("%s", e)
                    unclassified += 1
                    continue

                accounts.setdefault(account, AccountUsage()).add(st.st_size)

        duration = self._timer() - start
        logger.debug(
            "Rollup of %s: %d accounts in %.1fs (%d skipped)",
            self.store_root,
            len(accounts),
            duration,
            skipped,
        )
        return RollupResult(
            accounts=accounts,
            duration_seconds=duration,
            completed_at=self._clock(),
            skipped_entries=skipped,
            unclassified_files=unclassified,
        )
