# product_tracker/services/search_orchestrator.py

"""Runs every platform scraper concurrently and ranks their listings."""

import asyncio
import importlib
import logging
from typing import Any

from product_tracker.config.settings import ScraperConfig, Settings
from product_tracker.filters.relevance import RelevanceRanker
from product_tracker.models.listing import (
    Listing,
    Platform,
    PlatformResultSet,
    ScrapeRequest,
    empty_result_set,
)
from product_tracker.scrapers.proxy import ProxyResolver

logger = logging.getLogger("product_tracker.orchestrator")


def _load_scraper_class(dotted_path: str) -> type[Any]:
    """Dynamically import a scraper class from its dotted module path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls: type[Any] = getattr(module, class_name)
    return cls


class ScrapeOrchestrator:
    """Fans one query out to all platforms and assembles the result set."""

    def __init__(
        self,
        config: ScraperConfig | None = None,
        proxy_resolver: ProxyResolver | None = None,
    ) -> None:
        self.config = config or ScraperConfig()
        self.proxy_resolver = proxy_resolver
        self.sources = {
            Platform(src["id"]): src["scraper"]
            for src in Settings.AVAILABLE_SOURCES
        }

    # ── Private helpers ──────────────────────────────────

    def _search_platform(
        self, platform: Platform, request: ScrapeRequest,
    ) -> list[Listing]:
        """Instantiate and run one platform scraper (blocking)."""
        scraper_cls = _load_scraper_class(self.sources[platform])
        scraper = scraper_cls(
            request.query,
            request.source_url,
            request.timeout_per_platform[platform],
            request.max_results_per_platform,
            self.proxy_resolver,
        )
        listings: list[Listing] = scraper.search()
        return listings

    async def _run_scrapers(
        self, request: ScrapeRequest,
    ) -> list[list[Listing]]:
        """Dispatch scrapers concurrently; failures become empty lists."""
        platforms = list(Platform)
        tasks = [
            asyncio.to_thread(self._search_platform, platform, request)
            for platform in platforms
        ]
        batches = await asyncio.gather(*tasks, return_exceptions=True)

        results: list[list[Listing]] = []
        for platform, batch in zip(platforms, batches):
            if isinstance(batch, BaseException):
                logger.error(
                    "[%s] Scraper crashed for query '%s': %s",
                    platform.value,
                    request.query,
                    batch,
                    exc_info=batch,
                )
                results.append([])
            else:
                results.append(batch)
        return results

    # ── Public API ───────────────────────────────────────

    async def run_request(
        self, request: ScrapeRequest,
    ) -> PlatformResultSet:
        """Run all platforms for *request* and rank each platform's listings."""
        batches = await self._run_scrapers(request)
        cap = request.max_results_per_platform

        result: PlatformResultSet = {}
        for platform, listings in zip(Platform, batches):
            result[platform] = RelevanceRanker.rank(
                listings, request.query
            )[:cap]

        logger.info(
            "Query '%s' done: %s",
            request.query,
            ", ".join(
                f"{p.value}={len(result[p])}" for p in Platform
            ),
        )
        return result

    async def run(
        self, query: str, source_url: str | None = None,
    ) -> PlatformResultSet:
        """Search every platform for *query* using the configured limits."""
        query = query.strip()
        if not query:
            logger.warning("Empty query, skipping all platforms")
            return empty_result_set()
        request = ScrapeRequest.from_config(query, source_url, self.config)
        return await self.run_request(request)
