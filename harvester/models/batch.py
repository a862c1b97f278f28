"""
Batch data model.

A contiguous slice of the work queue fetched as one remote request.
"""

from dataclasses import dataclass
from typing import List, Tuple

from harvester.models.source import SourceRow


@dataclass(frozen=True)
class Batch:
    index: int  # 1-based position in the full run, skipped batches included
    rows: Tuple[SourceRow, ...] = ()

    @property
    def ids(self) -> List[int]:
        return [row.id for row in self.rows]

    @property
    def is_empty(self) -> bool:
        return len(self.rows) == 0

    def __len__(self) -> int:
        return len(self.rows)
