# product_tracker/scrapers/base_scraper.py

"""Abstract base class for all platform scrapers."""

import json
import logging
import random
import time
import urllib.parse
from abc import ABC, abstractmethod
from typing import Any

from product_tracker.config.settings import Settings
from product_tracker.models.listing import Listing, Platform
from product_tracker.scrapers.http_client import FetchClient, FetchError
from product_tracker.scrapers.proxy import ProxyResolver


class BaseScraper(ABC):
    """Shared fetch/retry/bot-detection loop for one platform search.

    Subclasses supply :meth:`build_search_url` and
    :meth:`parse_listings`; everything else (headers, retries,
    backoff, challenge-page detection) lives here.  :meth:`search`
    never raises.
    """

    platform: Platform

    def __init__(
        self,
        query: str,
        source_url: str | None,
        timeout_ms: int,
        max_results: int,
        proxy_resolver: ProxyResolver | None = None,
    ) -> None:
        self.query = query
        self.source_url = source_url
        self.timeout_ms = timeout_ms
        self.max_results = max_results
        self.source_name = self.platform.value
        self.logger = logging.getLogger(
            f"product_tracker.{self.source_name}"
        )
        self.settings = Settings()
        self.selectors: dict[str, Any] = self._load_selectors()
        self.proxy_resolver = proxy_resolver
        self._http_client: FetchClient | None = None
        self.attempts: int = 0

    def _load_selectors(self) -> dict[str, Any]:
        """Load CSS selectors for this platform from selectors.json."""
        with open(self.settings.SELECTORS_PATH, encoding="utf-8") as f:
            all_selectors: dict[str, Any] = json.load(f)
        result: dict[str, Any] = all_selectors.get(
            self.source_name, {}
        )
        return result

    def _get_http_client(self) -> FetchClient:
        """Return the fetch client, creating it on first use."""
        if self._http_client is None:
            self._http_client = FetchClient(
                self.proxy_resolver, tag=self.source_name
            )
        return self._http_client

    def _build_headers(self) -> dict[str, str]:
        """Browser-like request headers with the platform Referer."""
        return {
            **self.settings.DEFAULT_HEADERS,
            "Referer": self._get_homepage(),
        }

    def _bot_marker(self, html: str) -> str | None:
        """Return the first bot-challenge marker found in *html*."""
        lower = html.lower()
        for marker in self.selectors.get("bot_markers", []):
            if marker in lower:
                return str(marker)
        return None

    def _backoff(self, attempt: int) -> None:
        """Sleep a random 300-600ms unless *attempt* was the last one."""
        if attempt >= self.settings.MAX_RETRIES:
            return
        delay_ms = random.randrange(
            self.settings.RETRY_BACKOFF_MIN_MS,
            self.settings.RETRY_BACKOFF_MAX_MS,
        )
        time.sleep(delay_ms / 1000)

    def _fetch_html(self, url: str) -> str | None:
        """GET *url* with retries; None when no usable page was obtained."""
        client = self._get_http_client()
        headers = self._build_headers()
        max_retries = self.settings.MAX_RETRIES

        for attempt in range(1, max_retries + 1):
            self.attempts = attempt
            result = client.fetch(url, headers, self.timeout_ms)

            if isinstance(result, FetchError):
                if result.is_transient:
                    self.logger.warning(
                        "[%s] HTTP %d on attempt %d/%d",
                        self.source_name,
                        result.status,
                        attempt,
                        max_retries,
                    )
                elif result.status is not None:
                    self.logger.warning(
                        "[%s] Request failed with HTTP %d "
                        "on attempt %d/%d: %s",
                        self.source_name,
                        result.status,
                        attempt,
                        max_retries,
                        result.message,
                    )
                else:
                    self.logger.warning(
                        "[%s] Network error on attempt %d/%d: %s",
                        self.source_name,
                        attempt,
                        max_retries,
                        result.message,
                    )
                self._backoff(attempt)
                continue

            if not result.strip():
                self.logger.warning(
                    "[%s] Empty HTML response on attempt %d/%d",
                    self.source_name,
                    attempt,
                    max_retries,
                )
                self._backoff(attempt)
                continue

            marker = self._bot_marker(result)
            if marker is not None:
                # A challenge page will not change on retry.
                self.logger.warning(
                    "[%s] Bot challenge page detected "
                    "(marker: '%s'), giving up",
                    self.source_name,
                    marker,
                )
                return None

            self.logger.debug(
                "[%s] Fetched %d bytes on attempt %d",
                self.source_name,
                len(result),
                attempt,
            )
            return result

        self.logger.warning(
            "[%s] All %d attempts failed for %s",
            self.source_name,
            max_retries,
            url,
        )
        return None

    @staticmethod
    def absolute_url(href: str | None, base_url: str) -> str | None:
        """Resolve *href* against *base_url*; None unless http(s) with a host."""
        if not href or not href.strip():
            return None
        if not base_url.endswith("/"):
            base_url += "/"
        try:
            resolved = urllib.parse.urljoin(base_url, href.strip())
            parts = urllib.parse.urlsplit(resolved)
        except ValueError:
            return None
        if parts.scheme not in ("http", "https") or not parts.netloc:
            return None
        return resolved

    def search(self) -> list[Listing]:
        """Run the platform search; any failure yields an empty list."""
        try:
            url = self.build_search_url()
            if not url:
                return []

            self.logger.info(
                "[%s] Searching '%s'", self.source_name, self.query
            )
            html = self._fetch_html(url)
            if html is None:
                return []

            listings = self.parse_listings(html)
            self.logger.info(
                "[%s] Parsed %d listings",
                self.source_name,
                len(listings),
            )
            return listings[: self.max_results]
        except Exception as exc:
            self.logger.error(
                "[%s] Search failed: %s",
                self.source_name,
                exc,
                exc_info=True,
            )
            return []
        finally:
            if self._http_client is not None:
                self._http_client.close()
                self._http_client = None

    @abstractmethod
    def _get_homepage(self) -> str:
        """Return the homepage URL for the Referer header."""
        ...

    @abstractmethod
    def build_search_url(self) -> str:
        """Return the search URL, or "" when none can be built."""
        ...

    @abstractmethod
    def parse_listings(self, html: str) -> list[Listing]:
        """Extract at most ``max_results`` listings from *html*."""
        ...
