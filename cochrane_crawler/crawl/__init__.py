"""Crawl package — fetch scheduling, aggregation, orchestration & output."""

from cochrane_crawler.crawl.aggregator import RecordSequence, ResultAggregator
from cochrane_crawler.crawl.output import format_record, write_records
from cochrane_crawler.crawl.runner import Crawler, CrawlSummary, run_crawl
from cochrane_crawler.crawl.scheduler import FetchScheduler

__all__ = [
    "Crawler",
    "CrawlSummary",
    "run_crawl",
    "FetchScheduler",
    "ResultAggregator",
    "RecordSequence",
    "format_record",
    "write_records",
]
