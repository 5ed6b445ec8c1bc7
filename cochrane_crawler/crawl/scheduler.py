"""Concurrent page fetching with a bounded number of retry rounds.

Each round requests every still-pending URL at once and waits for the whole
batch to settle before touching the pending list.  URLs that fail stay pending
for the next round; whatever is still pending after the last round is dropped
and reported back to the caller.

Without ``max_in_flight`` a round is uncapped, so a topic with hundreds of
pages sends hundreds of simultaneous requests to the site.  Set a cap when
crawling politely matters more than wall-clock time.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Union

import httpx

from cochrane_crawler.errors import NetworkError
from cochrane_crawler.scraper.fetcher import fetch_url_async
from cochrane_crawler.scraper.models import (
    Dropped,
    Failure,
    FetchReport,
    PageContent,
    Success,
    Topic,
)

logger = logging.getLogger(__name__)

FetchFn = Callable[[str, httpx.AsyncClient], Awaitable[PageContent]]
RoundOutcome = Union[Success, Failure]

DEFAULT_MAX_ROUNDS = 3


def _describe(failure: Failure) -> str:
    if failure.status_code is None:
        return failure.reason
    return f"{failure.reason} ({failure.status_code})"


class FetchScheduler:
    """Fetches batches of URLs over a shared client.

    Args:
        client: The async transport, shared across every round and topic.
        max_rounds: Attempts per URL before it is dropped.
        max_in_flight: Cap on simultaneous requests within a round;
            ``None`` requests every pending URL at once.
        fetch: Coroutine performing one request; raises
            :class:`~cochrane_crawler.errors.NetworkError` on failure.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        max_rounds: int = DEFAULT_MAX_ROUNDS,
        max_in_flight: Optional[int] = None,
        fetch: FetchFn = fetch_url_async,
    ) -> None:
        if max_rounds < 1:
            raise ValueError(f"max_rounds must be at least 1, got {max_rounds}")
        if max_in_flight is not None and max_in_flight < 1:
            raise ValueError(f"max_in_flight must be positive, got {max_in_flight}")
        self.client = client
        self.max_rounds = max_rounds
        self.max_in_flight = max_in_flight
        self._fetch = fetch

    async def fetch_all(
        self, urls: List[str], max_rounds: Optional[int] = None
    ) -> FetchReport:
        """Fetch every URL in *urls*, retrying failures for up to *max_rounds* rounds."""
        return await self._drain(list(urls), self._budget(max_rounds))

    async def fetch_topic(self, topic: Topic, max_rounds: Optional[int] = None) -> FetchReport:
        """Drain ``topic.pending_urls`` into ``topic.fetched_pages``.

        Dropped URLs end up in ``topic.dropped`` mapped to their last failure.
        """
        report = await self._drain(topic.pending_urls, self._budget(max_rounds))
        topic.fetched_pages.extend(report.contents)
        for d in report.dropped:
            topic.dropped[d.url] = d.last_failure_reason
        return report

    def _budget(self, max_rounds: Optional[int]) -> int:
        if max_rounds is None:
            return self.max_rounds
        if max_rounds < 1:
            raise ValueError(f"max_rounds must be at least 1, got {max_rounds}")
        return max_rounds

    async def _drain(self, pending: List[str], max_rounds: int) -> FetchReport:
        # *pending* is only rewritten between rounds, never while one is in flight.
        report = FetchReport()
        last_failure: Dict[str, str] = {}
        rounds_left = max_rounds

        while pending and rounds_left > 0:
            report.rounds += 1
            logger.info(
                "[FETCH] Retrieving %d page(s), round %d of %d",
                len(pending), report.rounds, max_rounds,
            )
            outcomes = await self._run_round(pending)

            still_pending: List[str] = []
            for outcome in outcomes:
                if isinstance(outcome, Success):
                    report.contents.append(outcome.content)
                else:
                    reason = _describe(outcome)
                    last_failure[outcome.url] = reason
                    still_pending.append(outcome.url)
                    logger.warning("[FETCH] FAILED %s: %s", outcome.url, reason)

            pending[:] = still_pending
            rounds_left -= 1

        for url in pending:
            report.dropped.append(Dropped(url=url, last_failure_reason=last_failure[url]))
            logger.error(
                "[FETCH] Dropping %s after %d round(s): %s",
                url, report.rounds, last_failure[url],
            )
        pending.clear()
        return report

    async def _run_round(self, urls: List[str]) -> List[RoundOutcome]:
        """Attempt every URL once; return one tagged outcome per URL."""
        gate = asyncio.Semaphore(self.max_in_flight) if self.max_in_flight else None

        async def attempt(url: str) -> RoundOutcome:
            try:
                if gate is None:
                    page = await self._fetch(url, self.client)
                else:
                    async with gate:
                        page = await self._fetch(url, self.client)
            except NetworkError as exc:
                return Failure(url=url, reason=exc.reason, status_code=exc.status_code)
            return Success(url=url, content=page)

        return list(await asyncio.gather(*(attempt(url) for url in urls)))
