"""Crawl orchestration: topics index -> topic pages -> review records.

Topics are crawled one after another; only the pages of a single topic are
ever in flight together.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import httpx

from cochrane_crawler.config import Settings, settings as default_settings
from cochrane_crawler.crawl.aggregator import RecordSequence, ResultAggregator
from cochrane_crawler.crawl.output import write_records
from cochrane_crawler.crawl.scheduler import FetchFn, FetchScheduler
from cochrane_crawler.scraper.extractor import RecordExtractor
from cochrane_crawler.scraper.fetcher import build_async_client, fetch_url_async
from cochrane_crawler.scraper.models import Topic
from cochrane_crawler.scraper.pagination import resolve_pagination
from cochrane_crawler.scraper.selectors import DEFAULT_SELECTORS, Selectors
from cochrane_crawler.scraper.topics import discover_topics

logger = logging.getLogger(__name__)


@dataclass
class CrawlSummary:
    """Outcome of one crawl run; the records are pulled from :meth:`Crawler.records`."""

    topics: List[Topic] = field(default_factory=list)
    record_count: int = 0

    @property
    def dropped(self) -> Dict[str, Dict[str, str]]:
        """Dropped URLs and their last failure, per topic name (topics with none omitted)."""
        return {t.name: dict(t.dropped) for t in self.topics if t.dropped}

    @property
    def dropped_count(self) -> int:
        return sum(len(t.dropped) for t in self.topics)


class Crawler:
    """Crawls the Cochrane Library topic listings.

    Args:
        cfg: Settings to run with; defaults to the module singleton.
        client: Async transport to use.  When omitted, :meth:`crawl` builds
            one from *cfg* and closes it afterwards.
        selectors: Markup selectors for the target site.
        fetch: Single-request coroutine handed to the scheduler.
    """

    def __init__(
        self,
        cfg: Optional[Settings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        selectors: Selectors = DEFAULT_SELECTORS,
        fetch: FetchFn = fetch_url_async,
    ) -> None:
        self.cfg = cfg or default_settings
        self.selectors = selectors
        self._client = client
        self._fetch = fetch
        self.extractor = RecordExtractor(
            self.cfg.site_origin, selectors=selectors, parser=self.cfg.html_parser
        )
        self._aggregator = ResultAggregator()

    async def crawl(self, seed_url: Optional[str] = None) -> CrawlSummary:
        """Crawl every topic reachable from *seed_url*.

        Raises:
            NetworkError: If the topics index itself cannot be fetched.
            StructuralParseError: If no topics can be read from the index.
        """
        seed_url = seed_url or self.cfg.seed_url
        self._aggregator = ResultAggregator()

        if self._client is not None:
            return await self._crawl(self._client, seed_url)
        async with build_async_client(self.cfg) as client:
            return await self._crawl(client, seed_url)

    def records(self) -> RecordSequence:
        """Return the records of the last crawl as a single-pass sequence."""
        return self._aggregator.records()

    async def _crawl(self, client: httpx.AsyncClient, seed_url: str) -> CrawlSummary:
        logger.info("[TOPICS] Fetching topics index %s", seed_url)
        index = await self._fetch(seed_url, client)
        stubs = discover_topics(
            index.html,
            selectors=self.selectors,
            parser=self.cfg.html_parser,
            source_url=seed_url,
        )

        scheduler = FetchScheduler(
            client,
            max_rounds=self.cfg.max_rounds,
            max_in_flight=self.cfg.in_flight_limit,
            fetch=self._fetch,
        )
        summary = CrawlSummary()
        for stub in stubs:
            topic = Topic(stub=stub)
            await self._crawl_topic(topic, scheduler)
            summary.topics.append(topic)

        summary.record_count = len(self._aggregator)
        logger.info(
            "[CRAWL] %d record(s) from %d topic(s); %d page(s) dropped.",
            summary.record_count, len(summary.topics), summary.dropped_count,
        )
        return summary

    async def _crawl_topic(self, topic: Topic, scheduler: FetchScheduler) -> None:
        logger.info("[TOPIC] %s", topic.name)

        front_report = await scheduler.fetch_topic(topic)
        if not topic.fetched_pages:
            logger.error("[TOPIC] %s: front page unavailable, skipping topic.", topic.name)
            return

        front = topic.fetched_pages[0]
        topic.pending_urls = [
            url
            for url in resolve_pagination(
                front.html, topic.name, selectors=self.selectors, parser=self.cfg.html_parser
            )
            if url != topic.stub.front_url
        ]
        # One round budget covers the whole topic, front page included.
        rounds_left = scheduler.max_rounds - front_report.rounds
        if topic.pending_urls and rounds_left > 0:
            await scheduler.fetch_topic(topic, max_rounds=rounds_left)
        elif topic.pending_urls:
            for url in topic.pending_urls:
                topic.dropped[url] = "round budget exhausted by front page"
            logger.error(
                "[TOPIC] %s: no rounds left, dropping %d additional page(s).",
                topic.name, len(topic.pending_urls),
            )
            topic.pending_urls = []

        logger.info("[SCAN] %s: scanning %d page(s).", topic.name, len(topic.fetched_pages))
        for page in topic.fetched_pages:
            self._aggregator.add(self.extractor.extract(page, topic.name))


def run_crawl(
    cfg: Optional[Settings] = None,
    *,
    seed_url: Optional[str] = None,
    output: Optional[Path] = None,
) -> CrawlSummary:
    """Blocking entry point: crawl and write the records to *output*."""
    cfg = cfg or default_settings
    crawler = Crawler(cfg)
    summary = asyncio.run(crawler.crawl(seed_url))
    write_records(crawler.records(), output or cfg.output_path)
    return summary
