"""Scraper package — page fetch, topic/pagination discovery & record extraction."""

from cochrane_crawler.scraper.extractor import RecordExtractor, extract_records
from cochrane_crawler.scraper.fetcher import build_async_client, fetch_url, fetch_url_async
from cochrane_crawler.scraper.models import PageContent, ReviewRecord, Topic, TopicStub
from cochrane_crawler.scraper.pagination import resolve_pagination
from cochrane_crawler.scraper.topics import discover_topics

__all__ = [
    "build_async_client",
    "fetch_url",
    "fetch_url_async",
    "discover_topics",
    "resolve_pagination",
    "RecordExtractor",
    "extract_records",
    "PageContent",
    "ReviewRecord",
    "Topic",
    "TopicStub",
]
