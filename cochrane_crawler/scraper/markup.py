"""Thin query layer over BeautifulSoup.

The parser feature is chosen once (``settings.html_parser``) and passed in by
the caller; nothing here holds state between documents.
"""

from __future__ import annotations

from typing import List, Optional

from bs4 import BeautifulSoup, Tag


def parse_html(html: str, parser: str = "html.parser") -> BeautifulSoup:
    """Parse *html* into a queryable document."""
    return BeautifulSoup(html, parser)


def find_all(node: Tag, selector: str) -> List[Tag]:
    """Return every node under *node* matching *selector*, in document order."""
    return node.select(selector)


def first(node: Tag, selector: str) -> Optional[Tag]:
    """Return the first node under *node* matching *selector*, or ``None``."""
    return node.select_one(selector)


def inner_markup(node: Tag) -> str:
    """Return the markup between *node*'s opening and closing tags, verbatim."""
    return node.decode_contents()


def has_class(node: Tag, name: str) -> bool:
    return name in (node.get("class") or [])
