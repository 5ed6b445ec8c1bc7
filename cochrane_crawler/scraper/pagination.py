"""Pagination: find the additional listing pages of a topic."""

from __future__ import annotations

import logging
from typing import List

from cochrane_crawler.scraper.markup import find_all, first, has_class, parse_html
from cochrane_crawler.scraper.selectors import DEFAULT_SELECTORS, Selectors

logger = logging.getLogger(__name__)


def resolve_pagination(
    html: str,
    topic: str,
    *,
    selectors: Selectors = DEFAULT_SELECTORS,
    parser: str = "html.parser",
) -> List[str]:
    """Return the URLs of *topic*'s pages other than the one in *html*.

    The active pagination item is the page already in hand and is skipped;
    items without a link are skipped silently.  No deduplication is done.
    A page with no pagination control simply has no additional pages.
    """
    doc = parse_html(html, parser)
    urls: List[str] = []
    for item in find_all(doc, selectors.pagination_item):
        if has_class(item, selectors.pagination_active_class):
            continue
        link = first(item, selectors.pagination_link)
        if link is None or not link.get("href"):
            continue
        urls.append(link["href"])

    logger.debug("[TOPIC] %s: %d additional page(s) listed.", topic, len(urls))
    return urls
