# product_tracker/models/tracker.py

"""Request and response shapes of the tracker invocation contract."""

from dataclasses import dataclass, field
from typing import Any

from product_tracker.models.listing import (
    Platform,
    PlatformResultSet,
    empty_result_set,
)


@dataclass(frozen=True)
class TrackerInput:
    """Validated caller input."""

    product_query: str
    source_url: str | None = None
    max_results_per_platform: int | None = None


@dataclass
class MarginAnalysis:
    """Placeholder analysis block, populated by an external component."""

    dropshipping_probability: float = 0.0


@dataclass
class TrackerResponse:
    """Complete response for one tracker invocation."""

    product_query: str
    source_url: str | None = None
    product_page_url: str | None = None
    matches: PlatformResultSet = field(
        default_factory=empty_result_set
    )
    analysis: MarginAnalysis = field(default_factory=MarginAnalysis)

    def top_url(self, platform: Platform) -> str | None:
        """URL of the best-ranked listing for *platform*, if any."""
        listings = self.matches.get(platform, [])
        return listings[0].url if listings else None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the camelCase wire form."""
        data: dict[str, Any] = {
            "productQuery": self.product_query,
            "sourceUrl": self.source_url,
            "productPageUrl": self.product_page_url,
            "matches": {
                platform.value: [
                    listing.to_dict()
                    for listing in self.matches.get(platform, [])
                ]
                for platform in Platform
            },
            "analysis": {
                "dropshippingProbability": (
                    self.analysis.dropshipping_probability
                ),
            },
        }
        for platform in Platform:
            data[f"{platform.value}ProductUrl"] = self.top_url(platform)
        return data
