"""HTTP fetcher: blocking and awaitable page fetches over ``httpx``."""

from __future__ import annotations

import httpx

from cochrane_crawler.config import Settings, settings as default_settings
from cochrane_crawler.errors import NetworkError
from cochrane_crawler.scraper.models import PageContent

# The Cochrane site refuses to cooperate unless the request looks like it came
# from a browser.  Copied from a Firefox session.
_DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:126.0) "
        "Gecko/20100101 Firefox/126.0"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Priority": "u=1",
    "TE": "trailers",
}


def _client_options(cfg: Settings) -> dict:
    return {
        "headers": _DEFAULT_HEADERS,
        "timeout": cfg.request_timeout,
        "follow_redirects": True,
    }


def build_async_client(cfg: Settings | None = None) -> httpx.AsyncClient:
    """Return the shared async client for one crawl run.

    Cookies set by the site persist across requests in the client's jar.
    """
    return httpx.AsyncClient(**_client_options(cfg or default_settings))


def _to_page(url: str, response: httpx.Response) -> PageContent:
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise NetworkError(
            url,
            exc.response.reason_phrase or "HTTP error",
            status_code=exc.response.status_code,
        ) from exc
    return PageContent(url=url, html=response.text, status_code=response.status_code)


def fetch_url(url: str, client: httpx.Client | None = None) -> PageContent:
    """Fetch *url* and return a :class:`PageContent`.

    Raises:
        NetworkError: On a 4xx/5xx status (``status_code`` set) or when no
            response was received (``status_code`` is ``None``), including
            URLs httpx refuses to send.
    """
    try:
        if client is not None:
            response = client.get(url)
        else:
            with httpx.Client(**_client_options(default_settings)) as own_client:
                response = own_client.get(url)
    except (httpx.RequestError, httpx.InvalidURL) as exc:
        raise NetworkError(url, type(exc).__name__) from exc
    return _to_page(url, response)


async def fetch_url_async(url: str, client: httpx.AsyncClient) -> PageContent:
    """Awaitable counterpart of :func:`fetch_url` on a shared client."""
    try:
        response = await client.get(url)
    except (httpx.RequestError, httpx.InvalidURL) as exc:
        raise NetworkError(url, type(exc).__name__) from exc
    return _to_page(url, response)
