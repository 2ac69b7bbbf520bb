# product_tracker/scrapers/aliexpress_scraper.py

"""Scraper for aliexpress.com wholesale search pages."""

import math
import re
import urllib.parse

from bs4 import BeautifulSoup, Tag

from product_tracker.models.listing import Listing, Platform
from product_tracker.scrapers.base_scraper import BaseScraper

_ITEM_ID = re.compile(r"/item/(\d+)\.html")
_PRICE_PATTERN = re.compile(r"([$€£]|[A-Z]{3})?\s*([\d.,]+)")


class AliExpressScraper(BaseScraper):
    """Scraper for AliExpress search results.

    AliExpress ships several generations of card markup at once, so
    cards are collected through a union of selectors and every field
    is read through a fallback chain (see ``selectors.json``).
    """

    platform = Platform.ALIEXPRESS
    BASE_URL = "https://www.aliexpress.com"

    def _get_homepage(self) -> str:
        """Return the AliExpress homepage URL."""
        return f"{self.BASE_URL}/"

    def build_search_url(self) -> str:
        """Return the wholesale search URL for the query."""
        query = self.query.strip()
        if not query:
            return ""
        encoded = urllib.parse.quote(query, safe="")
        return (
            f"{self.BASE_URL}/wholesale?SearchText={encoded}"
            "&SortType=default"
        )

    # ------------------------------------------------------------------
    # Field extraction
    # ------------------------------------------------------------------

    def _find_item_anchor(self, card: Tag) -> Tag | None:
        """Product anchor inside the card, the card itself, or an ancestor."""
        anchor = card.select_one(self.selectors["item_anchor"])
        if anchor is not None:
            return anchor
        if card.name == "a" and "/item/" in str(card.get("href", "")):
            return card
        return card.find_parent(
            "a", href=lambda h: bool(h) and "/item/" in h
        )

    def _extract_title(self, card: Tag, anchor: Tag | None) -> str:
        candidates: list[str] = []
        if anchor is not None:
            candidates.append(str(anchor.get("title", "")))
        for selector in self.selectors["title_classes"]:
            el = card.select_one(selector)
            candidates.append(el.get_text() if el else "")
        if anchor is not None:
            candidates.append(anchor.get_text())
        for candidate in candidates:
            if candidate.strip():
                return candidate.strip()
        return ""

    def canonical_url(
        self, href: str,
    ) -> tuple[str | None, str | None]:
        """Absolute item URL without tracking params; ``(url, item_id)``."""
        url = self.absolute_url(href, self.BASE_URL)
        if url is None:
            return None, None
        match = _ITEM_ID.search(urllib.parse.urlsplit(url).path)
        if match:
            item_id = match.group(1)
            return f"{self.BASE_URL}/item/{item_id}.html", item_id
        return url, None

    def _extract_image(self, card: Tag) -> str | None:
        img = card.find("img")
        if not isinstance(img, Tag):
            return None
        for attr in self.selectors["image_attrs"]:
            value = img.get(attr)
            if value:
                return self.absolute_url(str(value), self.BASE_URL)
        return None

    def _extract_price_text(self, card: Tag) -> str:
        for selector in self.selectors["price_classes"]:
            text = "".join(el.get_text() for el in card.select(selector))
            if text.strip():
                return text.strip()
        return ""

    @staticmethod
    def parse_price(raw: str) -> tuple[float | None, str | None]:
        """Parse text like ``'US $1,299.50'`` into ``(1299.5, '$')``."""
        if not raw:
            return None, None
        match = _PRICE_PATTERN.search(raw)
        if not match:
            return None, None

        currency = match.group(1).strip() if match.group(1) else None
        numeric = re.sub(r"[^\d.]", "", match.group(2).replace(",", ""))
        try:
            price: float | None = float(numeric)
        except ValueError:
            price = None
        if price is not None and not math.isfinite(price):
            price = None
        return price, currency

    def _parse_card(self, card: Tag) -> Listing | None:
        """Parse a single product card into a Listing."""
        anchor = self._find_item_anchor(card)
        href = str(anchor.get("href", "")) if anchor is not None else ""
        if not href:
            href = str(card.get("href", ""))
        title = self._extract_title(card, anchor)
        if not href or not title:
            return None

        url, item_id = self.canonical_url(href)
        if url is None:
            return None

        price, currency = self.parse_price(self._extract_price_text(card))
        return Listing(
            platform=self.platform,
            title=title,
            url=url,
            id=item_id,
            price=price,
            currency=currency,
            image_url=self._extract_image(card),
        )

    def parse_listings(self, html: str) -> list[Listing]:
        """Extract listings from every matching card markup variant."""
        soup = BeautifulSoup(html, "lxml")
        listings: list[Listing] = []
        seen: set[str] = set()

        for card in soup.select(self.selectors["product_card"]):
            if len(listings) >= self.max_results:
                break
            listing = self._parse_card(card)
            if listing is None or listing.url in seen:
                continue
            seen.add(listing.url)
            listings.append(listing)

        return listings
