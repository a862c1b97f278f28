"""
Configuration settings for the board game harvester.

Centralized configuration for the ingestion pipeline and the BGG client.
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
OUTPUT_ROOT = PROJECT_ROOT / "output"
DEBUG_ROOT = PROJECT_ROOT / "debug"

# Input
DEFAULT_SOURCE_PATH = "boardgames_ranks_2024-04-26.csv"
SOURCE_ID_COLUMN = "id"

# BGG API Configuration
BGG_API_BASE = "https://boardgamegeek.com/xmlapi2"
BGG_API_TOKEN = os.getenv("BGG_API_TOKEN", "")
BGG_REQUEST_TIMEOUT_SECONDS = 60
BGG_USER_AGENT = "bgg-harvester/1.0"
THING_TYPE = "boardgame"

# Batching
DEFAULT_BATCH_SIZE = 40

# Pacing and retry (seconds)
RETRY_DELAY_SECONDS = 5.0
MIN_SECONDS_BETWEEN_REQUESTS = 5.0

# Output artifacts
BATCH_FILE_PREFIX = "batch_"
RAW_FILE_SUFFIX = "-raw"
STATS_FILE_PREFIX = "_stats_"

# Logging
LOG_LEVEL = "INFO"  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "harvester.log"
