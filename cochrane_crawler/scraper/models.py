"""Data models for the crawl pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

NOT_FOUND = "Not found"


@dataclass(frozen=True)
class TopicStub:
    """A topic as listed on the topics index page."""

    name: str
    front_url: str


@dataclass(frozen=True)
class PageContent:
    """The raw HTTP response body for a single URL fetch."""

    url: str
    html: str
    status_code: int = 200


@dataclass
class Topic:
    """Mutable per-topic crawl state, owned by the crawler for one pass.

    ``pending_urls`` starts as ``[front_url]``; after the front page is
    scanned it is replaced by the additional page URLs, and the fetch
    scheduler drains it at round boundaries.
    """

    stub: TopicStub
    pending_urls: List[str] = field(default_factory=list)
    fetched_pages: List[PageContent] = field(default_factory=list)
    dropped: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.pending_urls and not self.fetched_pages:
            self.pending_urls = [self.stub.front_url]

    @property
    def name(self) -> str:
        return self.stub.name


@dataclass(frozen=True)
class ReviewRecord:
    """Bibliographic metadata of one review.

    A record produced by a successful extraction always carries ``topic``,
    ``authors`` and ``date``; ``title``/``url`` are absent together when the
    review has no title anchor.  A node that failed extraction yields
    :meth:`empty` instead.
    """

    topic: Optional[str] = None
    title: Optional[str] = None
    url: Optional[str] = None
    authors: Optional[str] = None
    date: Optional[str] = None

    @classmethod
    def empty(cls) -> "ReviewRecord":
        return cls()

    @property
    def is_empty(self) -> bool:
        return all(
            v is None for v in (self.topic, self.title, self.url, self.authors, self.date)
        )


@dataclass(frozen=True)
class Success:
    """A fetch that produced content."""

    url: str
    content: PageContent


@dataclass(frozen=True)
class Failure:
    """A single failed attempt; the URL stays pending for the next round."""

    url: str
    reason: str
    status_code: Optional[int] = None


@dataclass(frozen=True)
class Dropped:
    """A URL that failed every round and was given up on."""

    url: str
    last_failure_reason: str


FetchOutcome = Union[Success, Dropped]


@dataclass
class FetchReport:
    """Everything :class:`~cochrane_crawler.crawl.scheduler.FetchScheduler` retrieved.

    ``contents`` is in completion order: round by round, and within a round
    in dispatch order.
    """

    contents: List[PageContent] = field(default_factory=list)
    dropped: List[Dropped] = field(default_factory=list)
    rounds: int = 0

    @property
    def dropped_urls(self) -> List[str]:
        return [d.url for d in self.dropped]

    @property
    def outcomes(self) -> List[FetchOutcome]:
        done: List[FetchOutcome] = [Success(url=c.url, content=c) for c in self.contents]
        return done + list(self.dropped)
