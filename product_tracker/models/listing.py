# product_tracker/models/listing.py

"""Listing data model for inter-module data flow."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from product_tracker.config.settings import ScraperConfig


class Platform(str, Enum):
    """Supported platforms, in result-assembly order."""

    AMAZON = "amazon"
    ALIEXPRESS = "aliexpress"
    SHOPIFY = "shopify"


@dataclass(frozen=True)
class Listing:
    """A single scraped product candidate from one platform."""

    platform: Platform
    title: str
    url: str
    id: str | None = None
    price: float | None = None
    currency: str | None = None
    image_url: str | None = None
    is_sponsored: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the camelCase wire form."""
        return {
            "platform": self.platform.value,
            "title": self.title,
            "url": self.url,
            "id": self.id,
            "price": self.price,
            "currency": self.currency,
            "imageUrl": self.image_url,
            "isSponsored": self.is_sponsored,
        }


# One entry per platform, in Platform order.
PlatformResultSet = dict[Platform, list[Listing]]


def empty_result_set() -> PlatformResultSet:
    """Return a result set with an empty list for every platform."""
    return {platform: [] for platform in Platform}


@dataclass(frozen=True)
class ScrapeRequest:
    """Parameters for one orchestrated run."""

    query: str
    source_url: str | None
    timeout_per_platform: Mapping[Platform, int]
    max_results_per_platform: int

    def __post_init__(self) -> None:
        if not self.query.strip():
            msg = "query must be a non-empty string"
            raise ValueError(msg)
        if self.max_results_per_platform < 1:
            msg = "max_results_per_platform must be positive"
            raise ValueError(msg)

    @classmethod
    def from_config(
        cls,
        query: str,
        source_url: str | None,
        config: "ScraperConfig",
    ) -> "ScrapeRequest":
        """Build a request from a :class:`ScraperConfig`."""
        return cls(
            query=query,
            source_url=source_url,
            timeout_per_platform={
                p: config.timeout_for(p) for p in Platform
            },
            max_results_per_platform=config.max_results_per_platform,
        )
