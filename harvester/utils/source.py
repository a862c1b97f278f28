"""
Source reader.

Loads the BGG ranks CSV that serves as the harvester's work queue.
"""

import logging
import os
from typing import List

import pandas as pd

from harvester.errors import SourceError
from harvester.models.source import SourceRow
import config.settings as settings

logger = logging.getLogger(__name__)


def load_source_rows(path: str, id_column: str = settings.SOURCE_ID_COLUMN) -> List[SourceRow]:
    """
    Read the key list in file order.

    Args:
        path: CSV file with a header row
        id_column: Column holding the BGG thing id

    Returns:
        One SourceRow per CSV row

    Raises:
        SourceError: If the file is missing, unreadable, or has no usable id column
    """
    if not os.path.exists(path):
        raise SourceError(f"Source file not found: {path}")

    try:
        df = pd.read_csv(path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, OSError) as e:
        raise SourceError(f"Failed to read source file {path}: {e}") from e

    if id_column not in df.columns:
        raise SourceError(f"Source file {path} has no '{id_column}' column")

    missing = df[id_column].isna().sum()
    if missing:
        logger.warning(f"Dropping {missing} rows without an id")
        df = df.dropna(subset=[id_column])

    # Keep ids as plain ints; other columns may contain NaN
    df = df.astype(object).where(pd.notna(df), None)

    rows = []
    for record in df.to_dict(orient="records"):
        try:
            rows.append(SourceRow(id=int(record[id_column]), fields=record))
        except (TypeError, ValueError) as e:
            raise SourceError(f"Invalid id {record[id_column]!r} in {path}") from e

    logger.info(f"Loaded {len(rows)} rows from {path}")
    return rows
