"""
BGG Harvester

CLI entry point for harvesting board game data from BoardGameGeek.
"""

import argparse
import logging
import sys

from harvester.errors import SourceError
from harvester.orchestrator import HarvestOrchestrator
import config.settings as settings


def setup_logging(log_level: str = "INFO"):
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(settings.LOG_FILE)
        ]
    )
    # Keep request-level chatter out of the progress log
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="BGG Harvester - batch download of BoardGameGeek game data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Harvest every game in the default ranks file
  python main.py

  # Resume a run after 120 finished batches
  python main.py --skip 120

  # Fetch a single batch and dump the raw API data to ./debug
  python main.py --debug --path boardgames_ranks.csv --batchsize 5

Note: Set BGG_API_TOKEN if your application is registered with BGG.
        """
    )

    parser.add_argument(
        "-p", "--path",
        default=settings.DEFAULT_SOURCE_PATH,
        help=f"Ranks CSV with an 'id' column (default: {settings.DEFAULT_SOURCE_PATH})"
    )

    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Run a single batch and also write the raw API data"
    )

    parser.add_argument(
        "-s", "--skip",
        type=int,
        default=0,
        help="Number of batches to skip before starting"
    )

    parser.add_argument(
        "-b", "--batchsize",
        type=int,
        default=settings.DEFAULT_BATCH_SIZE,
        help=f"Ids per request (default: {settings.DEFAULT_BATCH_SIZE})"
    )

    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )

    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    if args.debug:
        logger.info("Debug mode enabled, will only run for one batch")
    if args.batchsize != settings.DEFAULT_BATCH_SIZE:
        logger.info(f"Batch size set to {args.batchsize}")
    if args.path != settings.DEFAULT_SOURCE_PATH:
        logger.info(f"Path set to {args.path}")

    try:
        orchestrator = HarvestOrchestrator(
            source_path=args.path,
            batch_size=args.batchsize,
            skip_batches=args.skip,
            debug=args.debug
        )
    except (SourceError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    try:
        stats = orchestrator.run()
        logger.info(
            f"Processed {stats.batches_processed} batches "
            f"(stats: {orchestrator.tracker.stats_path})"
        )
        sys.exit(0)

    except KeyboardInterrupt:
        logger.warning("Harvest interrupted by user")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Harvest failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
