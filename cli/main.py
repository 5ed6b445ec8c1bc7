"""Cochrane crawler CLI.

Usage:
    python cli/main.py --help

Commands:
    crawl     → crawl every topic and write pipe-delimited review records
    topics    → list the topics found on the topics index page
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that
# `from cochrane_crawler.xxx import ...` works when the CLI is invoked as
# `python cli/main.py` from any working directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import logging
from dataclasses import replace
from typing import Optional

import typer

from cochrane_crawler.config import settings
from cochrane_crawler.crawl.runner import run_crawl
from cochrane_crawler.errors import CrawlError
from cochrane_crawler.scraper.fetcher import fetch_url
from cochrane_crawler.scraper.topics import discover_topics

app = typer.Typer(
    name="cochrane-crawler",
    help="Crawl the Cochrane Library for review metadata.",
    no_args_is_help=True,
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)-7s %(message)s",
        datefmt="%H:%M:%S",
    )


@app.command("crawl")
def crawl(
    seed_url: Optional[str] = typer.Option(None, help="Topics index URL."),
    output: Optional[Path] = typer.Option(None, help="Output file (pipe-delimited)."),
    max_rounds: Optional[int] = typer.Option(None, min=1, help="Fetch rounds per page before giving up."),
    max_in_flight: Optional[int] = typer.Option(
        None, min=0, help="Concurrent requests per round (0 = unlimited)."
    ),
    log_level: Optional[str] = typer.Option(None, help="Logging level (DEBUG, INFO, ...)."),
) -> None:
    """Crawl every topic and write one line per review to the output file."""
    cfg = replace(
        settings,
        seed_url=seed_url or settings.seed_url,
        output_path=output or settings.output_path,
        max_rounds=max_rounds if max_rounds is not None else settings.max_rounds,
        max_in_flight=max_in_flight if max_in_flight is not None else settings.max_in_flight,
        log_level=log_level or settings.log_level,
    )
    _configure_logging(cfg.log_level)

    typer.echo(f"[crawl] Crawling {cfg.seed_url!r} …")
    try:
        summary = run_crawl(cfg)
    except CrawlError as exc:
        typer.echo(f"[crawl] Fatal error loading Cochrane library topics page {cfg.seed_url!r}: {exc}")
        raise typer.Exit(1)

    typer.echo(f"[crawl] Topics  : {len(summary.topics)}")
    typer.echo(f"[crawl] Records : {summary.record_count}")
    typer.echo(f"[crawl] Dropped : {summary.dropped_count} page(s)")
    for topic, dropped in summary.dropped.items():
        for url, reason in dropped.items():
            typer.echo(f"  {topic}: {url}  ({reason})")
    typer.echo(f"[crawl] Wrote {cfg.output_path}")
    typer.echo("Done")


@app.command("topics")
def topics(
    seed_url: Optional[str] = typer.Option(None, help="Topics index URL."),
) -> None:
    """List the topics found on the topics index page."""
    url = seed_url or settings.seed_url
    try:
        page = fetch_url(url)
        stubs = discover_topics(page.html, parser=settings.html_parser, source_url=url)
    except CrawlError as exc:
        typer.echo(f"[topics] {exc}")
        raise typer.Exit(1)

    for stub in stubs:
        typer.echo(f"  {stub.name}  {stub.front_url}")
    typer.echo(f"[topics] {len(stubs)} topic(s).")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
