"""
Storage utility.

File I/O helpers for batch output, raw debug dumps, and run statistics.
"""

import json
import os
import logging
from typing import Dict, List

import config.settings as settings

logger = logging.getLogger(__name__)


class StorageManager:
    """
    Manages file I/O for all harvester artifacts.

    Handles:
    - Normalized batches (<root>/batch_N.json)
    - Raw debug dumps (<root>/batch_N-raw.json)
    - Run statistics (<root>/_stats_<epoch ms>.json)
    """

    def __init__(
        self,
        output_root: str,
        batch_prefix: str = settings.BATCH_FILE_PREFIX,
        raw_suffix: str = settings.RAW_FILE_SUFFIX,
        stats_prefix: str = settings.STATS_FILE_PREFIX
    ):
        """
        Initialize storage manager.

        Args:
            output_root: Directory for all artifacts (e.g., ./output or ./debug)
            batch_prefix: File name prefix for batch files
            raw_suffix: Suffix for raw debug dumps
            stats_prefix: File name prefix for the stats file
        """
        self.output_root = str(output_root)
        self.batch_prefix = batch_prefix
        self.raw_suffix = raw_suffix
        self.stats_prefix = stats_prefix

        # Create directory if it doesn't exist
        os.makedirs(self.output_root, exist_ok=True)

        logger.info(f"Initialized StorageManager with output_root={self.output_root}")

    def batch_path(self, batch_index: int) -> str:
        return os.path.join(self.output_root, f"{self.batch_prefix}{batch_index}.json")

    def raw_batch_path(self, batch_index: int) -> str:
        return os.path.join(
            self.output_root,
            f"{self.batch_prefix}{batch_index}{self.raw_suffix}.json"
        )

    def stats_path(self, started_at_ms: int) -> str:
        return os.path.join(self.output_root, f"{self.stats_prefix}{started_at_ms}.json")

    def save_batch(self, records: List[Dict], batch_index: int) -> str:
        """
        Save normalized records for one batch.

        Args:
            records: List of game dicts
            batch_index: 1-based batch number

        Returns:
            Path of the written file
        """
        return self._write_json(self.batch_path(batch_index), records, f"{len(records)} games")

    def save_raw_batch(self, items: List[Dict], batch_index: int) -> str:
        """Save the unnormalized items for one batch (debug mode)."""
        return self._write_json(self.raw_batch_path(batch_index), items, f"{len(items)} raw items")

    def save_stats(self, stats: Dict, started_at_ms: int) -> str:
        """Save the run summary."""
        return self._write_json(self.stats_path(started_at_ms), stats, "run stats")

    def _write_json(self, filepath: str, data, description: str) -> str:
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(data, f)
            logger.debug(f"Saved {description} to {filepath}")
            return filepath
        except Exception as e:
            logger.error(f"Failed to save {description} to {filepath}: {e}")
            raise
