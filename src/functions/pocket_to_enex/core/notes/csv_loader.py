"""Load the Pocket CSV export into source records."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd  # type: ignore

from ..contracts.records import SourceRecord

logger = logging.getLogger(__name__)

POCKET_COLUMNS = ("title", "url", "time_added", "tags", "status")


def load_records(path: str | Path, limit: Optional[int] = None) -> List[SourceRecord]:
    """Read up to ``limit`` rows of a Pocket export.

    All columns are read as strings with missing values as ``""``. Rows
    without a URL are skipped.

    Raises:
        FileNotFoundError: If ``path`` does not exist
    """

    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Input file not found: {csv_path}")

    df = pd.read_csv(
        csv_path,
        dtype=str,
        keep_default_na=False,
        nrows=limit,
        encoding="utf-8",
        on_bad_lines="warn",
    )
    df = df.reindex(columns=list(POCKET_COLUMNS), fill_value="").fillna("")

    records: List[SourceRecord] = []
    for position, row in enumerate(df.itertuples(index=False), start=1):
        url = row.url.strip()
        if not url:
            logger.warning("Skipping row %d without a URL", position)
            continue
        records.append(
            SourceRecord(
                url=url,
                title=row.title.strip() or None,
                time_added=row.time_added.strip() or 0,
                tags=row.tags,
                status=row.status,
            )
        )

    logger.info("Loaded %d records from %s", len(records), csv_path)
    return records
