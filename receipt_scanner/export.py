"""CSV export of extracted receipt fields."""
from __future__ import annotations

import csv
import io
from datetime import date, datetime, timezone
from typing import Optional

from .extraction import EXPORT_FIELDS, ExtractionResult

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"
LINE_TERMINATOR = "\n"


def to_csv(result: ExtractionResult) -> str:
    """Serialise ``result`` as a header row plus one data row."""

    output = io.StringIO()
    writer = csv.writer(output, lineterminator=LINE_TERMINATOR)
    writer.writerow([field.title() for field in EXPORT_FIELDS])
    writer.writerow(result.as_row())
    # Rows are separated, not terminated.
    return output.getvalue()[: -len(LINE_TERMINATOR)]


def export_filename(today: Optional[date] = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"receipt_data_{today.isoformat()}.csv"


__all__ = ["CSV_MEDIA_TYPE", "export_filename", "to_csv"]
