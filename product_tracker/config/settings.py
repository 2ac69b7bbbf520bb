# product_tracker/config/settings.py

"""Central configuration for the product_tracker engine."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

from product_tracker.models.listing import Platform

load_dotenv()


class Settings:
    """Central configuration for the product_tracker engine."""

    # --- Scraping ---
    DEFAULT_TIMEOUT_MS: int = 10_000    # Per-platform request timeout
    DEFAULT_MAX_RESULTS: int = 10       # Listings kept per platform
    MAX_RETRIES: int = 3                # Fetch attempts per search
    RETRY_BACKOFF_MIN_MS: int = 300     # Inter-attempt delay, lower bound
    RETRY_BACKOFF_MAX_MS: int = 600     # Inter-attempt delay, upper bound (exclusive)
    TRANSIENT_STATUSES: frozenset[int] = frozenset({429, 503})

    TIMEOUT_ENV_VARS: dict[Platform, str] = {
        Platform.AMAZON: "AMAZON_SCRAPER_TIMEOUT",
        Platform.ALIEXPRESS: "ALIEXPRESS_SCRAPER_TIMEOUT",
        Platform.SHOPIFY: "SHOPIFY_SCRAPER_TIMEOUT",
    }
    MAX_RESULTS_ENV_VAR: str = "MAX_RESULTS_PER_PLATFORM"

    # --- Proxy ---
    PROXY_URL: str = os.getenv("PROXY_URL", "")
    PROXY_POOL: str = os.getenv("PROXY_POOL", "")

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        ),
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
        "DNT": "1",
        "sec-ch-ua": (
            '"Google Chrome";v="131", '
            '"Chromium";v="131", '
            '"Not_A Brand";v="24"'
        ),
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "sec-fetch-user": "?1",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = (
        BASE_DIR / "product_tracker" / "config" / "selectors.json"
    )
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Sources (one adapter per platform, in platform order) ---
    AVAILABLE_SOURCES: list[dict[str, str]] = [
        {
            "id": "amazon",
            "label": "Amazon",
            "scraper": (
                "product_tracker.scrapers.amazon_scraper.AmazonScraper"
            ),
        },
        {
            "id": "aliexpress",
            "label": "AliExpress",
            "scraper": (
                "product_tracker.scrapers.aliexpress_scraper"
                ".AliExpressScraper"
            ),
        },
        {
            "id": "shopify",
            "label": "Shopify",
            "scraper": (
                "product_tracker.scrapers.shopify_scraper.ShopifyScraper"
            ),
        },
    ]


@dataclass(frozen=True)
class ScraperConfig:
    """Immutable per-run scraper configuration."""

    timeouts_ms: Mapping[Platform, int] = field(
        default_factory=lambda: MappingProxyType(
            {p: Settings.DEFAULT_TIMEOUT_MS for p in Platform}
        )
    )
    max_results_per_platform: int = Settings.DEFAULT_MAX_RESULTS

    def __post_init__(self) -> None:
        if self.max_results_per_platform < 1:
            msg = (
                "max_results_per_platform must be positive, "
                f"got {self.max_results_per_platform}"
            )
            raise ValueError(msg)
        for platform, timeout_ms in self.timeouts_ms.items():
            if timeout_ms < 1:
                msg = (
                    f"timeout for {platform.value} must be positive, "
                    f"got {timeout_ms}"
                )
                raise ValueError(msg)

    def timeout_for(self, platform: Platform) -> int:
        """Return the configured timeout (ms) for *platform*."""
        return self.timeouts_ms.get(
            platform, Settings.DEFAULT_TIMEOUT_MS
        )


def _positive_int(raw: str | None, default: int) -> int:
    """Parse *raw* as a positive integer, falling back to *default*."""
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value > 0 else default


def build_scraper_config(
    env: Mapping[str, str] | None = None,
    max_results_override: int | None = None,
) -> ScraperConfig:
    """Build a :class:`ScraperConfig` from environment variables.

    Missing, non-numeric or non-positive values fall back to the
    defaults in :class:`Settings`.  A positive *max_results_override*
    takes precedence over ``MAX_RESULTS_PER_PLATFORM``.
    """
    source = os.environ if env is None else env

    timeouts = {
        platform: _positive_int(
            source.get(var), Settings.DEFAULT_TIMEOUT_MS
        )
        for platform, var in Settings.TIMEOUT_ENV_VARS.items()
    }
    max_results = _positive_int(
        source.get(Settings.MAX_RESULTS_ENV_VAR),
        Settings.DEFAULT_MAX_RESULTS,
    )
    if max_results_override is not None and max_results_override > 0:
        max_results = max_results_override

    return ScraperConfig(
        timeouts_ms=MappingProxyType(timeouts),
        max_results_per_platform=max_results,
    )
