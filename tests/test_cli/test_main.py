"""
Tests for the command-line entry point.
"""

import pytest
from unittest.mock import MagicMock, patch

import main
from harvester.errors import SourceError


@pytest.fixture
def no_logging_setup():
    with patch('main.setup_logging'):
        yield


def test_parser_defaults():
    args = main.build_parser().parse_args([])

    assert args.path == "boardgames_ranks_2024-04-26.csv"
    assert args.debug is False
    assert args.skip == 0
    assert args.batchsize == 40


def test_parser_short_flags():
    args = main.build_parser().parse_args(["-d", "-s", "3", "-b", "20", "-p", "ranks.csv"])

    assert args.debug is True
    assert args.skip == 3
    assert args.batchsize == 20
    assert args.path == "ranks.csv"


def test_main_runs_orchestrator(no_logging_setup):
    with patch('main.HarvestOrchestrator') as orchestrator_cls:
        orchestrator = MagicMock()
        orchestrator.run.return_value = MagicMock(batches_processed=2)
        orchestrator_cls.return_value = orchestrator

        with pytest.raises(SystemExit) as exc_info:
            main.main(["--skip", "2", "--batchsize", "10", "--path", "ranks.csv"])

    assert exc_info.value.code == 0
    orchestrator_cls.assert_called_once_with(
        source_path="ranks.csv",
        batch_size=10,
        skip_batches=2,
        debug=False
    )
    orchestrator.run.assert_called_once()


@pytest.mark.parametrize("error", [ValueError("Invalid batch size: 0"), SourceError("not found")])
def test_main_configuration_error_exits_1(no_logging_setup, error):
    with patch('main.HarvestOrchestrator', side_effect=error):
        with pytest.raises(SystemExit) as exc_info:
            main.main(["--batchsize", "0"])

    assert exc_info.value.code == 1


def test_main_run_failure_exits_1(no_logging_setup):
    with patch('main.HarvestOrchestrator') as orchestrator_cls:
        orchestrator_cls.return_value.run.side_effect = RuntimeError("disk full")

        with pytest.raises(SystemExit) as exc_info:
            main.main([])

    assert exc_info.value.code == 1


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
