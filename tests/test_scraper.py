"""Tests for the scraper layer — fetch, topic discovery, pagination & extraction.

Mocking strategy:
- ``respx`` patches ``httpx`` at the transport layer so no real network calls
  are made during ``fetch_url`` / ``fetch_url_async`` tests.
- Everything else runs on literal HTML fixtures shaped like the Cochrane
  Library markup.
"""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import httpx
import pytest
import respx

from cochrane_crawler.errors import NetworkError, StructuralParseError
from cochrane_crawler.scraper.extractor import RecordExtractor, extract_records
from cochrane_crawler.scraper.fetcher import fetch_url, fetch_url_async
from cochrane_crawler.scraper.models import NOT_FOUND, PageContent, ReviewRecord, TopicStub
from cochrane_crawler.scraper.pagination import resolve_pagination
from cochrane_crawler.scraper.topics import discover_topics

ORIGIN = "https://www.cochranelibrary.com/"


# ---------------------------------------------------------------------------
# Fixtures / constants
# ---------------------------------------------------------------------------

_TOPICS_HTML = """\
<html><body>
<ul class="browse-by-list">
  <li class="browse-by-list-item">
    <a href="https://www.cochranelibrary.com/topic/allergy"><button>Allergy &amp; intolerance</button></a>
  </li>
  <li class="browse-by-list-item">
    <a href="https://www.cochranelibrary.com/topic/blood"><button>Blood disorders</button></a>
  </li>
  <li class="browse-by-list-item">
    <a href="https://www.cochranelibrary.com/topic/cancer"><button>Cancer</button></a>
  </li>
</ul>
</body></html>
"""

_PAGINATION_HTML = """\
<html><body>
<ul class="pagination-page-list">
  <li class="pagination-page-list-item active"><a href="https://example.org/t/page/1">1</a></li>
  <li class="pagination-page-list-item"><a href="https://example.org/t/page/2">2</a></li>
  <li class="pagination-page-list-item"><a href="https://example.org/t/page/3">3</a></li>
  <li class="pagination-page-list-item"><span>…</span></li>
  <li class="pagination-page-list-item"><a href="https://example.org/t/page/9">9</a></li>
</ul>
</body></html>
"""


def _review(
    href: str | None = "/cdsr/doi/10.1002/14651858.CD000001/full",
    title: str = "Antibiotics for sore throat",
    authors: str | None = "Spinks A, <b>Glasziou PP</b>",
    date: str | None = "12 March 2020",
    metadata: bool = True,
) -> str:
    parts = ['<div class="search-results-item"><div class="search-results-item-body">']
    if href is not None:
        parts.append(f'<h3 class="result-title"><a href="{href}">{title}</a></h3>')
    if authors is not None:
        parts.append(f'<div class="search-result-authors"><div>{authors}</div></div>')
    parts.append("</div>")
    if metadata:
        parts.append('<div class="search-result-metadata-block">')
        if date is not None:
            parts.append(f'<div class="search-result-date"><div>{date}</div></div>')
        parts.append("</div>")
    parts.append("</div>")
    return "".join(parts)


def _page(*reviews: str, url: str = "https://example.org/t/page/1") -> PageContent:
    return PageContent(url=url, html="<html><body>" + "".join(reviews) + "</body></html>")


# ---------------------------------------------------------------------------
# fetch_url / fetch_url_async
# ---------------------------------------------------------------------------

class TestFetchUrl:
    def test_successful_fetch_returns_page_content(self) -> None:
        with respx.mock:
            respx.get("https://example.org/topics").mock(
                return_value=httpx.Response(200, text=_TOPICS_HTML)
            )
            page = fetch_url("https://example.org/topics")

        assert isinstance(page, PageContent)
        assert page.url == "https://example.org/topics"
        assert page.status_code == 200
        assert "browse-by-list-item" in page.html

    def test_http_error_raises_network_error_with_status(self) -> None:
        with respx.mock:
            respx.get("https://example.org/missing").mock(
                return_value=httpx.Response(503, text="busy")
            )
            with pytest.raises(NetworkError) as info:
                fetch_url("https://example.org/missing")

        assert info.value.status_code == 503
        assert info.value.url == "https://example.org/missing"
        assert info.value.reason == "Service Unavailable"
        assert str(info.value) == "https://example.org/missing: Service Unavailable (503)"

    def test_transport_error_has_no_status(self) -> None:
        with respx.mock:
            respx.get("https://example.org/down").mock(
                side_effect=httpx.ConnectError("refused")
            )
            with pytest.raises(NetworkError) as info:
                fetch_url("https://example.org/down")

        assert info.value.status_code is None
        assert "ConnectError" in info.value.reason

    def test_malformed_url_raises_network_error(self) -> None:
        with pytest.raises(NetworkError) as info:
            fetch_url("https://example.org/p\x01")

        assert info.value.status_code is None
        assert info.value.reason == "InvalidURL"

    def test_browser_headers_are_sent(self) -> None:
        with respx.mock:
            route = respx.get("https://example.org/topics").mock(
                return_value=httpx.Response(200, text="ok")
            )
            fetch_url("https://example.org/topics")

        sent = route.calls.last.request.headers
        assert "Firefox" in sent["User-Agent"]
        assert sent["Sec-Fetch-Mode"] == "navigate"

    def test_async_fetch_uses_given_client(self) -> None:
        async def go() -> PageContent:
            async with httpx.AsyncClient() as client:
                return await fetch_url_async("https://example.org/a", client)

        with respx.mock:
            respx.get("https://example.org/a").mock(
                return_value=httpx.Response(200, text="<p>a</p>")
            )
            page = asyncio.run(go())

        assert page.html == "<p>a</p>"

    def test_async_fetch_http_error(self) -> None:
        async def go() -> PageContent:
            async with httpx.AsyncClient() as client:
                return await fetch_url_async("https://example.org/gone", client)

        with respx.mock:
            respx.get("https://example.org/gone").mock(return_value=httpx.Response(404))
            with pytest.raises(NetworkError) as info:
                asyncio.run(go())

        assert info.value.status_code == 404


# ---------------------------------------------------------------------------
# discover_topics
# ---------------------------------------------------------------------------

class TestDiscoverTopics:
    def test_one_stub_per_item_in_document_order(self) -> None:
        stubs = discover_topics(_TOPICS_HTML)
        assert [s.name for s in stubs] == ["Allergy & intolerance", "Blood disorders", "Cancer"]
        assert all(s.front_url for s in stubs)
        assert stubs[1] == TopicStub(
            name="Blood disorders", front_url="https://www.cochranelibrary.com/topic/blood"
        )

    def test_malformed_item_is_skipped(self) -> None:
        html = """\
<ul>
  <li class="browse-by-list-item"><button>No link</button></li>
  <li class="browse-by-list-item"><a href="/x">No button</a></li>
  <li class="browse-by-list-item"><a href="/ok"><button>Fine</button></a></li>
</ul>
"""
        stubs = discover_topics(html)
        assert stubs == [TopicStub(name="Fine", front_url="/ok")]

    def test_name_is_not_normalised(self) -> None:
        html = '<li class="browse-by-list-item"><a href="/t"><button> Child health </button></a></li>'
        assert discover_topics(html)[0].name == " Child health "

    def test_no_items_is_structural_error(self) -> None:
        with pytest.raises(StructuralParseError, match="browse-by-list-item"):
            discover_topics("<html><body><p>Maintenance</p></body></html>", source_url="https://x/")

    def test_only_malformed_items_is_structural_error(self) -> None:
        html = '<li class="browse-by-list-item"><span>empty</span></li>'
        with pytest.raises(StructuralParseError):
            discover_topics(html)


# ---------------------------------------------------------------------------
# resolve_pagination
# ---------------------------------------------------------------------------

class TestResolvePagination:
    def test_skips_active_and_linkless_items(self) -> None:
        urls = resolve_pagination(_PAGINATION_HTML, "Cancer")
        assert urls == [
            "https://example.org/t/page/2",
            "https://example.org/t/page/3",
            "https://example.org/t/page/9",
        ]

    def test_no_pagination_control_means_no_extra_pages(self) -> None:
        assert resolve_pagination(_page(_review()).html, "Cancer") == []

    def test_duplicates_are_kept(self) -> None:
        html = """\
<ul class="pagination-page-list">
  <li class="pagination-page-list-item"><a href="/p2">2</a></li>
  <li class="pagination-page-list-item"><a href="/p2">2</a></li>
</ul>
"""
        assert resolve_pagination(html, "T") == ["/p2", "/p2"]

    def test_items_outside_the_control_are_ignored(self) -> None:
        html = """\
<ul class="other-list"><li class="pagination-page-list-item"><a href="/stray">x</a></li></ul>
<ul class="pagination-page-list"><li class="pagination-page-list-item"><a href="/p2">2</a></li></ul>
"""
        assert resolve_pagination(html, "T") == ["/p2"]


# ---------------------------------------------------------------------------
# RecordExtractor
# ---------------------------------------------------------------------------

class TestRecordExtractor:
    def test_full_record(self) -> None:
        (record,) = extract_records(_page(_review()), "Ear, nose and throat", ORIGIN)

        assert record == ReviewRecord(
            topic="Ear, nose and throat",
            title="Antibiotics for sore throat",
            url="https://www.cochranelibrary.com//cdsr/doi/10.1002/14651858.CD000001/full",
            authors="Spinks A, <b>Glasziou PP</b>",
            date="12 March 2020",
        )

    def test_origin_is_prefixed_even_to_absolute_href(self) -> None:
        (record,) = extract_records(
            _page(_review(href="https://other.example/r")), "T", ORIGIN
        )
        assert record.url == ORIGIN + "https://other.example/r"

    def test_title_is_link_text_without_markup(self) -> None:
        (record,) = extract_records(
            _page(_review(title="Zinc <em>vs</em> placebo &amp; more")), "T", ORIGIN
        )
        assert record.title == "Zinc vs placebo & more"
        assert record.authors == "Spinks A, <b>Glasziou PP</b>"

    def test_missing_title_anchor_leaves_title_and_url_absent(self) -> None:
        (record,) = extract_records(_page(_review(href=None)), "T", ORIGIN)
        assert record.title is None
        assert record.url is None
        assert record.authors == "Spinks A, <b>Glasziou PP</b>"

    def test_missing_authors_block_defaults(self) -> None:
        (record,) = extract_records(_page(_review(authors=None)), "T", ORIGIN)
        assert record.authors == NOT_FOUND

    def test_missing_metadata_block_defaults_date(self) -> None:
        (record,) = extract_records(_page(_review(metadata=False)), "T", ORIGIN)
        assert record.date == NOT_FOUND

    def test_missing_date_element_defaults_date(self) -> None:
        (record,) = extract_records(_page(_review(date=None)), "T", ORIGIN)
        assert record.date == NOT_FOUND

    def test_empty_date_element_gives_empty_string(self) -> None:
        (record,) = extract_records(_page(_review(date="")), "T", ORIGIN)
        assert record.date == ""

    def test_records_in_document_order(self) -> None:
        page = _page(
            _review(title="First"), _review(title="Second"), _review(title="Third")
        )
        titles = [r.title for r in extract_records(page, "T", ORIGIN)]
        assert titles == ["First", "Second", "Third"]

    def test_page_without_reviews_yields_nothing(self) -> None:
        assert extract_records(_page(), "T", ORIGIN) == []

    def test_failing_node_yields_empty_record_and_scan_continues(self) -> None:
        page = _page(_review(title="Broken"), _review(title="Fine"))
        extractor = RecordExtractor(ORIGIN)
        with patch.object(
            RecordExtractor,
            "extract_node",
            side_effect=[RuntimeError("boom"), ReviewRecord(topic="T", title="Fine")],
        ):
            records = list(extractor.extract(page, "T"))

        assert records[0].is_empty
        assert records[1].title == "Fine"

    def test_extraction_is_deterministic(self) -> None:
        page = _page(_review(), _review(href=None), _review(date=""))
        first_run = extract_records(page, "T", ORIGIN)
        second_run = extract_records(page, "T", ORIGIN)
        assert first_run == second_run
