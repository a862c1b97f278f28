"""
Unit tests for the Storage Manager.
"""

import json
import os
import tempfile

import pytest
from harvester.utils.storage import StorageManager


def test_creates_output_directory():
    with tempfile.TemporaryDirectory() as tmpdir:
        output_root = os.path.join(tmpdir, "nested", "output")
        StorageManager(output_root)

        assert os.path.isdir(output_root)


def test_save_batch_names_file_by_index():
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = StorageManager(tmpdir)

        path = storage.save_batch([{"id": 1}, {"id": 2}], 7)

        assert path == os.path.join(tmpdir, "batch_7.json")
        with open(path) as f:
            assert json.load(f) == [{"id": 1}, {"id": 2}]


def test_save_raw_batch_uses_suffix():
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = StorageManager(tmpdir)

        path = storage.save_raw_batch([{"id": 1, "polls": []}], 3)

        assert os.path.basename(path) == "batch_3-raw.json"


def test_save_stats_names_file_by_start_time():
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = StorageManager(tmpdir)

        path = storage.save_stats({"batchesProcessed": 2}, 1714000000000)

        assert os.path.basename(path) == "_stats_1714000000000.json"
        with open(path) as f:
            assert json.load(f) == {"batchesProcessed": 2}


def test_custom_prefixes():
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = StorageManager(tmpdir, batch_prefix="games_", raw_suffix=".raw")

        assert os.path.basename(storage.batch_path(1)) == "games_1.json"
        assert os.path.basename(storage.raw_batch_path(1)) == "games_1.raw.json"


def test_unicode_is_preserved():
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = StorageManager(tmpdir)

        path = storage.save_batch([{"description": "Cafés & Bars "}], 1)

        with open(path, encoding="utf-8") as f:
            assert json.load(f)[0]["description"] == "Cafés & Bars "


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
