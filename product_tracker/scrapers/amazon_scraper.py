# product_tracker/scrapers/amazon_scraper.py

"""Scraper for amazon.com search result pages."""

import re
import urllib.parse

from bs4 import BeautifulSoup, Tag

from product_tracker.models.listing import Listing, Platform
from product_tracker.scrapers.base_scraper import BaseScraper

CURRENCY_SYMBOLS: dict[str, str] = {
    "$": "USD",
    "€": "EUR",
    "£": "GBP",
}

# /dp/<ASIN> and /gp/product/<ASIN>
_ASIN_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"/dp/([A-Z0-9]{10})", re.IGNORECASE),
    re.compile(r"/gp/product/([A-Z0-9]{10})", re.IGNORECASE),
)


class AmazonScraper(BaseScraper):
    """Scraper for amazon.com organic search results.

    Sponsored placements are skipped.  Product links are unwrapped
    from Amazon's click-tracking redirects and canonicalised to
    ``/dp/<ASIN>``.
    """

    platform = Platform.AMAZON
    BASE_URL = "https://www.amazon.com"

    def _get_homepage(self) -> str:
        """Return the Amazon homepage URL."""
        return f"{self.BASE_URL}/"

    def build_search_url(self) -> str:
        """Return the Amazon search URL for the query."""
        query = self.query.strip()
        if not query:
            return ""
        return f"{self.BASE_URL}/s?k={urllib.parse.quote(query, safe='')}"

    # ------------------------------------------------------------------
    # Field extraction
    # ------------------------------------------------------------------

    def _is_sponsored(self, card: Tag) -> bool:
        """True if the card is a sponsored placement."""
        if card.get("data-component-type") == "sp-sponsored-result":
            return True
        return card.select_one(self.selectors["sponsored_label"]) is not None

    def normalize_link(
        self, raw_link: str,
    ) -> tuple[str | None, str | None]:
        """Canonicalise a result link; returns ``(url, asin)``."""
        candidate = self.absolute_url(raw_link, self.BASE_URL)
        if candidate is None:
            return None, None

        parts = urllib.parse.urlsplit(candidate)
        params = urllib.parse.parse_qs(parts.query)
        target = (params.get("url") or params.get("location") or [""])[0]
        if target:
            candidate = self.absolute_url(
                urllib.parse.unquote(target), self.BASE_URL
            )
            if candidate is None:
                return None, None
            parts = urllib.parse.urlsplit(candidate)

        for pattern in _ASIN_PATTERNS:
            match = pattern.search(parts.path)
            if match:
                asin = match.group(1).upper()
                return f"{self.BASE_URL}/dp/{asin}", asin

        path = parts.path.rstrip("/")
        return f"{parts.scheme}://{parts.netloc}{path}", None

    def _first_text(self, scope: Tag, key: str) -> str:
        el = scope.select_one(self.selectors[key])
        return el.get_text(strip=True) if el else ""

    def extract_price(
        self, card: Tag,
    ) -> tuple[float | None, str | None]:
        """Read ``(price, currency)`` from the card's price block."""
        price_el = card.select_one(self.selectors["price"])
        if price_el is None:
            return None, None

        symbol = self._first_text(price_el, "price_symbol")
        whole = re.sub(r"\D", "", self._first_text(price_el, "price_whole"))
        fraction = re.sub(
            r"\D", "", self._first_text(price_el, "price_fraction")
        )

        price = float(f"{whole}.{fraction or '00'}") if whole else None
        currency = CURRENCY_SYMBOLS.get(symbol, symbol) if symbol else None
        return price, currency

    def _extract_image(self, card: Tag) -> str | None:
        img = card.select_one(self.selectors["image"])
        if img is None:
            img = card.select_one("img[src]")
        if img is None:
            return None
        return self.absolute_url(str(img.get("src", "")), self.BASE_URL)

    def _parse_card(self, card: Tag) -> Listing | None:
        """Parse a single organic result card into a Listing."""
        title = "".join(
            span.get_text() for span in card.select(self.selectors["title"])
        ).strip()
        link_el = card.select_one(self.selectors["url"])
        raw_link = str(link_el.get("href", "")) if link_el else ""
        if not title or not raw_link:
            return None

        url, asin = self.normalize_link(raw_link)
        if url is None:
            self.logger.debug(
                "[amazon] Dropped card with unusable link %r", raw_link
            )
            return None

        price, currency = self.extract_price(card)
        return Listing(
            platform=self.platform,
            title=title,
            url=url,
            id=asin,
            price=price,
            currency=currency,
            image_url=self._extract_image(card),
        )

    def parse_listings(self, html: str) -> list[Listing]:
        """Extract organic listings, skipping sponsored cards."""
        soup = BeautifulSoup(html, "lxml")
        listings: list[Listing] = []

        for card in soup.select(self.selectors["product_card"]):
            if len(listings) >= self.max_results:
                break
            if self._is_sponsored(card):
                continue
            listing = self._parse_card(card)
            if listing is not None:
                listings.append(listing)

        return listings
