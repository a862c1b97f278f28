"""
Batch Planner.

Splits the ordered source rows into fixed-size batches and supports
resuming a previous run by skipping whole batches.
"""

import logging
import math
from typing import Iterator, Sequence

from harvester.models.batch import Batch
from harvester.models.source import SourceRow

logger = logging.getLogger(__name__)


class BatchPlanner:
    """
    Cursor over an immutable sequence of source rows.

    Rows are never removed from the underlying sequence; taking a batch
    only moves the cursor forward.
    """

    def __init__(self, rows: Sequence[SourceRow], batch_size: int):
        """
        Initialize batch planner.

        Args:
            rows: Source rows in work order
            batch_size: Number of rows per batch (positive)

        Raises:
            ValueError: If batch_size is not a positive integer
        """
        if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size <= 0:
            raise ValueError(f"Invalid batch size: {batch_size}. Must be a positive integer")

        self.rows = tuple(rows)
        self.batch_size = batch_size
        self.total_batches = math.ceil(len(self.rows) / batch_size)
        self.starting_index = 0
        self._cursor = 0
        self._next_index = 1
        self._started = False

        logger.info(f"Planned {self.total_batches} batches of up to {batch_size} rows")

    @property
    def remaining(self) -> int:
        return len(self.rows) - self._cursor

    def skip(self, batch_count: int) -> None:
        """
        Skip the first batch_count batches, e.g. those done by an earlier run.

        Raises:
            ValueError: If batch_count is negative
            RuntimeError: If a batch has already been taken
        """
        if batch_count < 0:
            raise ValueError(f"Invalid skip count: {batch_count}. Must be >= 0")
        if self._started:
            raise RuntimeError("Cannot skip batches after batching has started")

        self._cursor = min(batch_count * self.batch_size, len(self.rows))
        self.starting_index = batch_count
        self._next_index = batch_count + 1
        logger.info(f"Skipping to batch {batch_count + 1}")

    def take(self) -> Batch:
        """Return the next batch; an empty batch means the queue is exhausted."""
        self._started = True
        end = min(self._cursor + self.batch_size, len(self.rows))
        batch = Batch(index=self._next_index, rows=self.rows[self._cursor:end])
        if not batch.is_empty:
            self._cursor = end
            self._next_index += 1
        return batch

    def __iter__(self) -> Iterator[Batch]:
        while True:
            batch = self.take()
            if batch.is_empty:
                return
            yield batch
