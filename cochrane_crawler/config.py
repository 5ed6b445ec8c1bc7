"""Centralised settings for the Cochrane review crawler.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Target site
    # ------------------------------------------------------------------
    seed_url: str = field(
        default_factory=lambda: os.environ.get(
            "COCHRANE_SEED_URL",
            "http://www.cochranelibrary.com/home/topic-and-review-group-list.html?page=topic",
        )
    )
    site_origin: str = field(
        default_factory=lambda: os.environ.get(
            "COCHRANE_SITE_ORIGIN", "https://www.cochranelibrary.com/"
        )
    )

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------
    max_rounds: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_MAX_ROUNDS", "3"))
    )
    # 0 leaves every round uncapped: all pending pages are requested at once.
    max_in_flight: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_MAX_IN_FLIGHT", "0"))
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "30.0"))
    )

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------
    html_parser: str = field(
        default_factory=lambda: os.environ.get("HTML_PARSER", "html.parser")
    )

    # ------------------------------------------------------------------
    # Output / diagnostics
    # ------------------------------------------------------------------
    output_path: Path = field(
        default_factory=lambda: Path(
            os.environ.get("CRAWL_OUTPUT_PATH", "cochrane_reviews.txt")
        )
    )
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO")
    )

    @property
    def in_flight_limit(self) -> int | None:
        """Per-round concurrency cap, or ``None`` when uncapped."""
        return self.max_in_flight if self.max_in_flight > 0 else None


# Module-level singleton: import this everywhere:
#   from cochrane_crawler.config import settings
settings = Settings()
