"""Ordered accumulation of review records across topics and pages."""

from __future__ import annotations

from typing import Iterable, Iterator, List, Sequence

from cochrane_crawler.scraper.models import ReviewRecord


class RecordSequence(Iterator[ReviewRecord]):
    """Single-pass, forward-only view over a finished list of records.

    Iterating it a second time yields nothing; run a new crawl for a fresh
    sequence.
    """

    def __init__(self, records: Sequence[ReviewRecord]) -> None:
        self._records = records
        self._position = 0

    def __iter__(self) -> "RecordSequence":
        return self

    def __next__(self) -> ReviewRecord:
        if self._position >= len(self._records):
            raise StopIteration
        record = self._records[self._position]
        self._position += 1
        return record

    @property
    def remaining(self) -> int:
        return len(self._records) - self._position


class ResultAggregator:
    """Collects records in arrival order.

    Topics are added one after another, and within a topic pages arrive in
    fetch-completion order.  Once :meth:`records` is called the aggregator is
    sealed and refuses further additions.
    """

    def __init__(self) -> None:
        self._records: List[ReviewRecord] = []
        self._sealed = False

    def add(self, records: Iterable[ReviewRecord]) -> int:
        """Append *records*; return how many were added."""
        if self._sealed:
            raise RuntimeError("cannot add records after iteration has begun")
        before = len(self._records)
        self._records.extend(records)
        return len(self._records) - before

    def __len__(self) -> int:
        return len(self._records)

    def records(self) -> RecordSequence:
        self._sealed = True
        return RecordSequence(tuple(self._records))
