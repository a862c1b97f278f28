"""
Unit tests for RunStats and the Stats Tracker.
"""

import json
import os
import signal
import tempfile
from datetime import datetime, timedelta, timezone

import pytest
from harvester.models.stats import RunStats
from harvester.utils.stats import StatsTracker
from harvester.utils.storage import StorageManager


START = datetime(2024, 4, 26, 12, 0, 0, tzinfo=timezone.utc)


def fixed_clock(*moments):
    """Clock returning the given datetimes in order, then the last one forever."""
    remaining = list(moments)

    def clock():
        if len(remaining) > 1:
            return remaining.pop(0)
        return remaining[0]

    return clock


def read_only_stats_file(tmpdir):
    files = [f for f in os.listdir(tmpdir) if f.startswith("_stats_")]
    assert len(files) == 1
    with open(os.path.join(tmpdir, files[0])) as f:
        return files[0], json.load(f)


def test_running_average_recurrence():
    stats = RunStats(start=START, batch_size=40, available_batches=3, starting_batch=1)

    stats.record_success(2.0)
    stats.record_success(4.0)
    stats.record_success(9.0)

    assert stats.batches_processed == 3
    assert stats.average_time_per_batch == pytest.approx(5.0)


def test_stats_serialization():
    stats = RunStats(start=START, batch_size=40, available_batches=3, starting_batch=2)
    stats.record_error([41, 42], "No data returned from BGG API")
    stats.end = START + timedelta(minutes=1)

    data = stats.to_dict()

    assert data["start"] == "2024-04-26T12:00:00+00:00"
    assert data["end"] == "2024-04-26T12:01:00+00:00"
    assert data["batchSize"] == 40
    assert data["availableBatches"] == 3
    assert data["startingBatch"] == 2
    assert data["batchesProcessed"] == 0
    assert data["errors"] == [{"ids": [41, 42], "error": "No data returned from BGG API"}]


def test_tracker_writes_once_on_normal_exit():
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = StorageManager(tmpdir)
        clock = fixed_clock(START, START + timedelta(seconds=30))

        with StatsTracker(storage, 40, 3, 1, clock=clock) as tracker:
            tracker.record_success(1.5)

        name, data = read_only_stats_file(tmpdir)
        assert name == f"_stats_{int(START.timestamp() * 1000)}.json"
        assert data["batchesProcessed"] == 1
        assert data["end"] == "2024-04-26T12:00:30+00:00"


def test_tracker_writes_on_exception():
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = StorageManager(tmpdir)

        with pytest.raises(RuntimeError):
            with StatsTracker(storage, 40, 3, 1) as tracker:
                tracker.record_error([1, 2], "boom")
                raise RuntimeError("unexpected")

        _, data = read_only_stats_file(tmpdir)
        assert data["errors"] == [{"ids": [1, 2], "error": "boom"}]
        assert data["end"] is not None


def test_tracker_writes_on_keyboard_interrupt():
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = StorageManager(tmpdir)

        with pytest.raises(KeyboardInterrupt):
            with StatsTracker(storage, 40, 3, 1):
                raise KeyboardInterrupt

        read_only_stats_file(tmpdir)


def test_tracker_turns_sigterm_into_exit():
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = StorageManager(tmpdir)
        previous = signal.getsignal(signal.SIGTERM)

        with pytest.raises(SystemExit):
            with StatsTracker(storage, 40, 3, 1):
                handler = signal.getsignal(signal.SIGTERM)
                handler(signal.SIGTERM, None)

        read_only_stats_file(tmpdir)
        assert signal.getsignal(signal.SIGTERM) == previous


def test_flush_is_idempotent():
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = StorageManager(tmpdir)
        clock = fixed_clock(START, START + timedelta(seconds=5), START + timedelta(seconds=9))
        tracker = StatsTracker(storage, 40, 3, 1, clock=clock)

        with tracker:
            first = tracker.flush()
        second = tracker.flush()

        assert first == second
        _, data = read_only_stats_file(tmpdir)
        assert data["end"] == "2024-04-26T12:00:05+00:00"


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
