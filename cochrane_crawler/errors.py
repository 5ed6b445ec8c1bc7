"""Exception types raised by the crawler.

Only :class:`StructuralParseError` raised while reading the topics index (and
a :class:`NetworkError` on the topics index itself) ever escapes
:meth:`cochrane_crawler.crawl.runner.Crawler.crawl`; everything else is
recovered per URL or per review node.
"""

from __future__ import annotations


class CrawlError(Exception):
    """Base class for all crawler errors."""


class NetworkError(CrawlError):
    """A single page fetch failed.

    ``status_code`` is the HTTP status when the server answered with an
    error, ``None`` when the request never got a response (timeout, refused
    connection, ...).
    """

    def __init__(self, url: str, reason: str, status_code: int | None = None) -> None:
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(str(self))

    def __str__(self) -> str:
        code = self.status_code if self.status_code is not None else "no response"
        return f"{self.url}: {self.reason} ({code})"


class StructuralParseError(CrawlError):
    """The markup did not contain what the selectors expect."""

    def __init__(self, message: str, url: str | None = None) -> None:
        self.url = url
        super().__init__(f"{message} [{url}]" if url else message)


class ExtractionError(CrawlError):
    """A single review node could not be turned into a record."""
