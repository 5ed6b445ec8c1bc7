"""CSS selectors tied to the Cochrane Library's current markup."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Selectors:
    # Topics index ("Browse by topic")
    topic_item: str = ".browse-by-list-item"
    topic_link: str = "a"
    topic_name: str = "button"

    # Pagination control on a topic listing page
    pagination_item: str = "ul.pagination-page-list li.pagination-page-list-item"
    pagination_active_class: str = "active"
    pagination_link: str = "a"

    # Review listing
    review_item: str = ".search-results-item"
    review_title_link: str = ".search-results-item-body h3.result-title a"
    review_authors: str = ".search-result-authors div"
    review_metadata: str = ".search-result-metadata-block"
    review_date: str = ".search-result-date div"


DEFAULT_SELECTORS = Selectors()
