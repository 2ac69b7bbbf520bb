# product_tracker/scrapers/shopify_scraper.py

"""Shopify storefront discovery via DuckDuckGo's HTML results page."""

import re
import urllib.parse

from bs4 import BeautifulSoup, Tag

from product_tracker.models.listing import Listing, Platform
from product_tracker.scrapers.base_scraper import BaseScraper


class ShopifyScraper(BaseScraper):
    """Find product pages on independent Shopify storefronts.

    Storefronts cannot be crawled one by one, so this scraper runs a
    ``site:myshopify.com`` web search and keeps the results hosted on
    Shopify.  Search snippets carry no price or image, so those
    fields are always ``None``.
    """

    platform = Platform.SHOPIFY
    SEARCH_BASE_URL = "https://duckduckgo.com/html/"

    def _get_homepage(self) -> str:
        """Return the DuckDuckGo homepage URL."""
        return "https://duckduckgo.com/"

    def _build_headers(self) -> dict[str, str]:
        """Search-page navigation comes from the engine's own origin."""
        return {
            **super()._build_headers(),
            "sec-fetch-site": "same-origin",
        }

    def build_search_url(self) -> str:
        """Return the site-restricted web search URL for the query."""
        query = self.query.strip()
        if not query:
            return ""
        params = urllib.parse.urlencode(
            {"q": f"{query} site:myshopify.com product", "ia": "web"}
        )
        return f"{self.SEARCH_BASE_URL}?{params}"

    def normalize_result_link(self, raw_href: str | None) -> str | None:
        """Unwrap DuckDuckGo's ``/l/?uddg=`` redirect to the destination URL."""
        if not raw_href or not raw_href.strip():
            return None
        href = raw_href.strip()

        resolved = self.absolute_url(href, self.SEARCH_BASE_URL)
        if resolved is not None:
            parts = urllib.parse.urlsplit(resolved)
            if (
                parts.netloc.endswith("duckduckgo.com")
                and parts.path.startswith("/l/")
            ):
                targets = urllib.parse.parse_qs(parts.query).get("uddg")
                target = targets[0] if targets else ""
                if not target.startswith("http"):
                    return None
                return self.absolute_url(target, "")

        if href.startswith("http"):
            return self.absolute_url(href, "")
        return None

    def _is_storefront(self, url: str) -> bool:
        host = urllib.parse.urlsplit(url).netloc
        return bool(
            re.search(self.selectors["domain_pattern"], host, re.IGNORECASE)
        )

    def _parse_result(self, result: Tag) -> Listing | None:
        anchor = result.select_one(self.selectors["anchor"])
        if anchor is None:
            return None

        url = self.normalize_result_link(str(anchor.get("href", "")))
        if url is None or not self._is_storefront(url):
            return None

        title = anchor.get_text().strip()
        if not title:
            return None

        return Listing(platform=self.platform, title=title, url=url)

    def parse_listings(self, html: str) -> list[Listing]:
        """Extract storefront listings from the search results page."""
        soup = BeautifulSoup(html, "lxml")
        listings: list[Listing] = []

        for result in soup.select(self.selectors["result"]):
            if len(listings) >= self.max_results:
                break
            listing = self._parse_result(result)
            if listing is not None:
                listings.append(listing)

        return listings
