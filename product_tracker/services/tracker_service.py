# product_tracker/services/tracker_service.py

"""Invocation contract: validate caller input, run the orchestrator."""

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from product_tracker.config.settings import ScraperConfig, build_scraper_config
from product_tracker.models.listing import Platform
from product_tracker.models.tracker import (
    MarginAnalysis,
    TrackerInput,
    TrackerResponse,
)
from product_tracker.scrapers.proxy import EnvProxyResolver, ProxyResolver
from product_tracker.services.search_orchestrator import ScrapeOrchestrator

logger = logging.getLogger("product_tracker.tracker")


class InvalidInputError(ValueError):
    """Caller input failed validation."""


def parse_tracker_input(payload: Mapping[str, Any]) -> TrackerInput:
    """Validate a ``{productQuery, sourceUrl, maxResultsPerPlatform}`` payload.

    Raises:
        InvalidInputError: if ``productQuery`` is missing or blank.
    """
    raw_query = payload.get("productQuery")
    if not isinstance(raw_query, str) or not raw_query.strip():
        msg = "productQuery must be a non-empty string"
        raise InvalidInputError(msg)

    raw_source = payload.get("sourceUrl")
    source_url = (
        raw_source.strip()
        if isinstance(raw_source, str) and raw_source.strip()
        else None
    )

    raw_max = payload.get("maxResultsPerPlatform")
    max_results = (
        raw_max
        if isinstance(raw_max, int)
        and not isinstance(raw_max, bool)
        and raw_max > 0
        else None
    )

    return TrackerInput(
        product_query=raw_query.strip(),
        source_url=source_url,
        max_results_per_platform=max_results,
    )


async def run_tracker(
    tracker_input: TrackerInput,
    config: ScraperConfig | None = None,
    proxy_resolver: ProxyResolver | None = None,
) -> TrackerResponse:
    """Run every platform scraper and wrap the matches in a response.

    Without an explicit *proxy_resolver* the ``PROXY_URL`` /
    ``PROXY_POOL`` environment settings are used.
    """
    if config is None:
        config = build_scraper_config(
            max_results_override=tracker_input.max_results_per_platform
        )
    elif (tracker_input.max_results_per_platform or 0) > 0:
        config = replace(
            config,
            max_results_per_platform=(
                tracker_input.max_results_per_platform
            ),
        )

    orchestrator = ScrapeOrchestrator(
        config, proxy_resolver or EnvProxyResolver()
    )
    matches = await orchestrator.run(
        tracker_input.product_query, tracker_input.source_url
    )

    logger.info(
        "[tracker] matches={%s}",
        ", ".join(f"{p.value}:{len(matches[p])}" for p in Platform),
    )
    return TrackerResponse(
        product_query=tracker_input.product_query,
        source_url=tracker_input.source_url,
        product_page_url=tracker_input.source_url,
        matches=matches,
        analysis=MarginAnalysis(dropshipping_probability=0.0),
    )
