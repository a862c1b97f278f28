"""
Run statistics data model.

Summary of one harvester execution, written once when the process ends.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class BatchError:
    """A failed fetch attempt for one batch."""
    ids: List[int]
    error: str

    def to_dict(self) -> dict:
        return {"ids": list(self.ids), "error": self.error}


@dataclass
class RunStats:
    """
    Mutable run summary.

    Updated by the orchestrator after every batch attempt. Timestamps are
    timezone-aware UTC datetimes; average_time_per_batch is in seconds.
    """
    start: datetime
    batch_size: int
    available_batches: int
    starting_batch: int
    end: Optional[datetime] = None
    batches_processed: int = 0
    average_time_per_batch: float = 0.0
    errors: List[BatchError] = field(default_factory=list)

    def record_success(self, duration: float) -> None:
        """Count a processed batch and fold its duration into the running mean."""
        self.batches_processed += 1
        n = self.batches_processed
        self.average_time_per_batch = (
            self.average_time_per_batch * (n - 1) + duration
        ) / n

    def record_error(self, ids: List[int], error: str) -> None:
        self.errors.append(BatchError(ids=list(ids), error=error))

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat() if self.end else None,
            "batchSize": self.batch_size,
            "availableBatches": self.available_batches,
            "startingBatch": self.starting_batch,
            "batchesProcessed": self.batches_processed,
            "averageTimePerBatch": self.average_time_per_batch,
            "errors": [e.to_dict() for e in self.errors],
        }
