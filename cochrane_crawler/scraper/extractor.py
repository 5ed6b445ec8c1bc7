"""Record extraction: turns a review listing page into :class:`ReviewRecord` values."""

from __future__ import annotations

import logging
from typing import Iterator, List

from bs4 import Tag

from cochrane_crawler.errors import ExtractionError
from cochrane_crawler.scraper.markup import find_all, first, inner_markup, parse_html
from cochrane_crawler.scraper.models import NOT_FOUND, PageContent, ReviewRecord
from cochrane_crawler.scraper.selectors import DEFAULT_SELECTORS, Selectors

logger = logging.getLogger(__name__)


class RecordExtractor:
    """Extracts review metadata from listing pages.

    Args:
        site_origin: Prefix joined verbatim onto each review link's ``href``.
            The href is not checked for being absolute already.
        selectors: Markup selectors for the review listing.
        parser: BeautifulSoup parser feature.
    """

    def __init__(
        self,
        site_origin: str,
        *,
        selectors: Selectors = DEFAULT_SELECTORS,
        parser: str = "html.parser",
    ) -> None:
        self.site_origin = site_origin
        self.selectors = selectors
        self.parser = parser

    def extract(self, page: PageContent, topic: str) -> Iterator[ReviewRecord]:
        """Yield one record per review item on *page*, in document order.

        A node that raises during extraction yields :meth:`ReviewRecord.empty`
        and the scan carries on with the next node.
        """
        doc = parse_html(page.html, self.parser)
        for position, node in enumerate(find_all(doc, self.selectors.review_item), start=1):
            try:
                yield self.extract_node(node, topic)
            except Exception as exc:
                error = ExtractionError(f"review #{position} on {page.url}: {exc}")
                logger.warning("[EXTRACT] %s", error)
                yield ReviewRecord.empty()

    def extract_node(self, node: Tag, topic: str) -> ReviewRecord:
        """Build a record from a single review item node."""
        sel = self.selectors

        title = url = None
        link = first(node, sel.review_title_link)
        if link is not None:
            title = link.get_text()
            url = self.site_origin + (link.get("href") or "")

        authors_node = first(node, sel.review_authors)
        # Inner markup, not text: author lists keep their HTML.
        authors = inner_markup(authors_node) if authors_node is not None else NOT_FOUND

        date = NOT_FOUND
        block = first(node, sel.review_metadata)
        if block is not None:
            date_node = first(block, sel.review_date)
            if date_node is not None:
                # An empty date element gives "" rather than the default.
                date = inner_markup(date_node)

        return ReviewRecord(topic=topic, title=title, url=url, authors=authors, date=date)


def extract_records(
    page: PageContent,
    topic: str,
    site_origin: str,
    *,
    selectors: Selectors = DEFAULT_SELECTORS,
    parser: str = "html.parser",
) -> List[ReviewRecord]:
    """Convenience wrapper returning every record of *page* as a list."""
    extractor = RecordExtractor(site_origin, selectors=selectors, parser=parser)
    return list(extractor.extract(page, topic))
