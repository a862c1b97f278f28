"""
Harvest Orchestrator.

Drives the sequential batch loop: fetch a batch from BGG, normalize it,
write it, wait out the request interval, repeat.
"""

import logging
import time
from typing import Callable, List, Optional

from harvester.agents.batching import BatchPlanner
from harvester.agents.ingestion import BggThingClient
from harvester.agents.normalization import GameNormalizer
from harvester.models.batch import Batch
from harvester.models.stats import RunStats
from harvester.utils.source import load_source_rows
from harvester.utils.stats import StatsTracker
from harvester.utils.storage import StorageManager
import config.settings as settings

logger = logging.getLogger(__name__)


class HarvestOrchestrator:
    """
    Runs one harvest over the source file.

    Flow per batch:
    1. Fetch → (on failure: record error, new client, wait, same batch again)
    2. Normalize → 3. Write batch file → 4. Update stats → 5. Pace

    Batches are strictly sequential so the BGG rate limit is never exceeded.
    In debug mode the raw items are also written and the run stops after
    the first successful batch.
    """

    def __init__(
        self,
        source_path: str,
        batch_size: int = settings.DEFAULT_BATCH_SIZE,
        skip_batches: int = 0,
        debug: bool = False,
        output_root: Optional[str] = None,
        client_factory: Callable[[], BggThingClient] = BggThingClient,
        sleep: Callable[[float], None] = time.sleep,
        timer: Callable[[], float] = time.perf_counter,
        retry_delay_seconds: float = settings.RETRY_DELAY_SECONDS,
        min_seconds_between_requests: float = settings.MIN_SECONDS_BETWEEN_REQUESTS
    ):
        """
        Initialize harvest orchestrator.

        Args:
            source_path: Ranks CSV with an `id` column
            batch_size: Ids per BGG request
            skip_batches: Batches finished by an earlier run
            debug: Single batch run with raw data dump
            output_root: Artifact directory, defaults to output/ or debug/
            client_factory: Builds a fresh BGG client (also after failures)
            sleep: Sleep function, seconds
            timer: Monotonic clock, seconds
            retry_delay_seconds: Wait before retrying a failed batch
            min_seconds_between_requests: Floor on time between batch requests

        Raises:
            SourceError: If the source file cannot be read
            ValueError: If batch_size or skip_batches is invalid
        """
        self.debug = debug
        self.client_factory = client_factory
        self.sleep = sleep
        self.timer = timer
        self.retry_delay_seconds = retry_delay_seconds
        self.min_seconds_between_requests = min_seconds_between_requests

        if output_root is None:
            output_root = settings.DEBUG_ROOT if debug else settings.OUTPUT_ROOT

        # Configuration errors surface here, before any request is made
        rows = load_source_rows(source_path)
        self.planner = BatchPlanner(rows, batch_size)
        if skip_batches:
            self.planner.skip(skip_batches)

        self.storage = StorageManager(output_root)
        self.normalizer = GameNormalizer()
        self.client: Optional[BggThingClient] = None
        self.tracker: Optional[StatsTracker] = None

        logger.info(f"Total batch count: {self.planner.total_batches}")

    def run(self) -> RunStats:
        """
        Process every remaining batch.

        Returns:
            The run statistics (also written to the stats file)
        """
        self.tracker = StatsTracker(
            storage=self.storage,
            batch_size=self.planner.batch_size,
            available_batches=self.planner.total_batches,
            starting_batch=self.planner.starting_index + 1
        )

        with self.tracker:
            self.client = self.client_factory()
            try:
                batch = self.planner.take()
                while not batch.is_empty:
                    if not self._process_batch(batch):
                        continue

                    if self.debug:
                        logger.info("Single batch run complete in debug mode. Exiting.")
                        break

                    batch = self.planner.take()
            finally:
                self._close_client()

        logger.info(
            f"Harvest finished: {self.tracker.stats.batches_processed} batches processed, "
            f"{len(self.tracker.stats.errors)} errors"
        )
        return self.tracker.stats

    def _process_batch(self, batch: Batch) -> bool:
        """
        Run one attempt for a batch.

        Returns:
            True if the batch was written, False if it has to be retried
        """
        start = self.timer()
        logger.info(f"Batch #{batch.index}: {batch.ids}")

        items = self._fetch(batch)
        if items is None:
            return False

        games = self.normalizer.normalize_many(items)
        self.storage.save_batch([game.to_dict() for game in games], batch.index)

        elapsed = self.timer() - start
        self.tracker.record_success(elapsed)
        self._log_progress(batch.index, elapsed)

        if self.debug:
            self.storage.save_raw_batch(items, batch.index)
            return True

        if elapsed < self.min_seconds_between_requests:
            self.sleep(self.min_seconds_between_requests - elapsed)
        return True

    def _fetch(self, batch: Batch) -> Optional[List[dict]]:
        """Fetch a batch; on failure record it, reset the client, back off, return None."""
        try:
            items = self.client.query(
                batch.ids,
                videos=0,
                comments=0,
                marketplace=0,
                stats=1,
                type=settings.THING_TYPE
            )
        except Exception as e:
            logger.error(f"Error fetching batch {batch.index}: {e}", exc_info=True)
            self._recover(batch, f"Error fetching batch {batch.index}: {e}")
            return None

        if not items:
            logger.error(f"No data returned from BGG API for batch {batch.index}")
            self._recover(batch, "No data returned from BGG API")
            return None

        return items

    def _recover(self, batch: Batch, error: str) -> None:
        self.tracker.record_error(batch.ids, error)
        logger.warning(
            f"Recreating client and retrying batch {batch.index} "
            f"after {self.retry_delay_seconds:g}sec..."
        )
        self._close_client()
        self.client = self.client_factory()
        self.sleep(self.retry_delay_seconds)

    def _close_client(self) -> None:
        if self.client is None:
            return
        close = getattr(self.client, "close", None)
        if close is not None:
            try:
                close()
            except Exception as e:
                logger.warning(f"Failed to close BGG client: {e}")
        self.client = None

    def _log_progress(self, batch_index: int, elapsed: float) -> None:
        total = self.planner.total_batches
        average = self.tracker.stats.average_time_per_batch
        remaining_minutes = average * (total - batch_index) / 60
        logger.info(
            f"Batch {batch_index}/{total} ({batch_index / total * 100:.2f}%) "
            f"took {elapsed:.2f}sec | Remaining Time: {remaining_minutes:.2f}min "
            f"(average: {average:.2f}s)"
        )
