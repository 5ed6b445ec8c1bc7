"""Topic discovery: turns the topics index page into :class:`TopicStub` values."""

from __future__ import annotations

import logging
from typing import List

from cochrane_crawler.errors import StructuralParseError
from cochrane_crawler.scraper.markup import find_all, first, parse_html
from cochrane_crawler.scraper.models import TopicStub
from cochrane_crawler.scraper.selectors import DEFAULT_SELECTORS, Selectors

logger = logging.getLogger(__name__)


def discover_topics(
    html: str,
    *,
    selectors: Selectors = DEFAULT_SELECTORS,
    parser: str = "html.parser",
    source_url: str | None = None,
) -> List[TopicStub]:
    """Return one :class:`TopicStub` per topic list item, in document order.

    Each item contributes the ``href`` of its first link as the front URL and
    the text of its first button as the name.  Items missing either are
    skipped with a warning.

    Raises:
        StructuralParseError: If the page yields no topics at all.
    """
    doc = parse_html(html, parser)
    items = find_all(doc, selectors.topic_item)
    if not items:
        raise StructuralParseError(
            f"no topic list items matching {selectors.topic_item!r}", url=source_url
        )

    stubs: List[TopicStub] = []
    for position, item in enumerate(items, start=1):
        link = first(item, selectors.topic_link)
        button = first(item, selectors.topic_name)
        href = link.get("href") if link is not None else None
        if not href or button is None:
            logger.warning("[TOPICS] Skipping malformed topic item #%d", position)
            continue
        stubs.append(TopicStub(name=button.get_text(), front_url=href))

    if not stubs:
        raise StructuralParseError(
            f"{len(items)} topic list item(s) found but none had a link and a name",
            url=source_url,
        )

    logger.info("[TOPICS] Discovered %d topic(s).", len(stubs))
    return stubs
