"""
Source row data model.

Represents one entry of the ranks CSV that drives the work queue.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SourceRow:
    """
    One row of the input key list.
    Only the BGG thing id is needed by the pipeline; the rest is kept for logging.
    """
    id: int  # BGG thing id
    fields: dict = field(default_factory=dict, compare=False)

    def __post_init__(self):
        if self.id <= 0:
            raise ValueError(f"Invalid id: {self.id}. Must be positive")
