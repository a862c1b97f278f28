"""
Run statistics tracker.

Holds the RunStats of one harvester run and writes them exactly once when
the run scope ends, however it ends.
"""

import logging
import signal
import threading
from datetime import datetime, timezone
from typing import Callable, List, Optional

from harvester.models.stats import RunStats
from harvester.utils.storage import StorageManager

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StatsTracker:
    """
    Mutable run summary scoped to a `with` block.

    Usage:
        with StatsTracker(storage, batch_size=40, available_batches=10, starting_batch=1) as tracker:
            tracker.record_success(duration)

    On exit (normal return, exception, Ctrl-C, or SIGTERM) the end time is
    set and the stats file is written. SIGTERM is turned into SystemExit
    while the block runs so that the exit path executes.
    """

    def __init__(
        self,
        storage: StorageManager,
        batch_size: int,
        available_batches: int,
        starting_batch: int,
        clock: Callable[[], datetime] = utc_now
    ):
        self.storage = storage
        self.clock = clock
        self.stats = RunStats(
            start=clock(),
            batch_size=batch_size,
            available_batches=available_batches,
            starting_batch=starting_batch
        )
        self.started_at_ms = int(self.stats.start.timestamp() * 1000)
        self.stats_path: Optional[str] = None
        self._flushed = False
        self._previous_sigterm = None

    def __enter__(self) -> "StatsTracker":
        self._install_sigterm_handler()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            self.flush()
        finally:
            self._restore_sigterm_handler()
        return False

    def record_success(self, duration: float) -> None:
        self.stats.record_success(duration)

    def record_error(self, ids: List[int], error: str) -> None:
        self.stats.record_error(ids, error)

    def flush(self) -> Optional[str]:
        """Set the end time and write the stats file. Later calls are no-ops."""
        if self._flushed:
            return self.stats_path
        self._flushed = True
        self.stats.end = self.clock()
        self.stats_path = self.storage.save_stats(self.stats.to_dict(), self.started_at_ms)
        logger.info(
            f"Run stats written to {self.stats_path} "
            f"({self.stats.batches_processed} batches, {len(self.stats.errors)} errors)"
        )
        return self.stats_path

    def _install_sigterm_handler(self) -> None:
        # signal handlers can only be set from the main thread
        if threading.current_thread() is not threading.main_thread():
            return

        def handle_sigterm(signum, frame):
            logger.warning(f"Received signal {signum}, stopping run")
            raise SystemExit(128 + signum)

        self._previous_sigterm = signal.signal(signal.SIGTERM, handle_sigterm)

    def _restore_sigterm_handler(self) -> None:
        if self._previous_sigterm is not None:
            signal.signal(signal.SIGTERM, self._previous_sigterm)
            self._previous_sigterm = None
