"""Pipe-delimited output of review records."""

from __future__ import annotations

from pathlib import Path
from typing import IO, Iterable, Union

from cochrane_crawler.scraper.models import ReviewRecord

FIELD_ORDER = ("url", "topic", "title", "authors", "date")


def format_record(record: ReviewRecord) -> str:
    """Render *record* as ``url|topic|title|authors|date`` plus a newline.

    Absent fields are written as empty strings.  Field values are not escaped.
    """
    values = (getattr(record, name) for name in FIELD_ORDER)
    return "|".join("" if v is None else v for v in values) + "\n"


def write_records(
    records: Iterable[ReviewRecord], destination: Union[str, Path, IO[str]]
) -> int:
    """Write one line per record to *destination*; return the number of lines."""
    if isinstance(destination, (str, Path)):
        with open(destination, "w", encoding="utf-8") as f:
            return write_records(records, f)

    count = 0
    for record in records:
        destination.write(format_record(record))
        count += 1
    return count
