# tests/test_tracker_service.py

"""Tests for input validation and the tracker service entry point."""

import unittest
from unittest.mock import AsyncMock, patch

from product_tracker.config.settings import ScraperConfig
from product_tracker.models.listing import Listing, Platform, empty_result_set
from product_tracker.models.tracker import TrackerInput
from product_tracker.scrapers.proxy import EnvProxyResolver
from product_tracker.services.tracker_service import (
    InvalidInputError,
    parse_tracker_input,
    run_tracker,
)

ORCH_PATH = "product_tracker.services.tracker_service.ScrapeOrchestrator"


class TestParseTrackerInput(unittest.TestCase):
    """parse_tracker_input validation rules."""

    def test_query_trimmed(self) -> None:
        result = parse_tracker_input({"productQuery": "  red mug "})
        self.assertEqual(result.product_query, "red mug")
        self.assertIsNone(result.source_url)
        self.assertIsNone(result.max_results_per_platform)

    def test_missing_or_blank_query(self) -> None:
        for payload in ({}, {"productQuery": "   "}, {"productQuery": 42}):
            with self.subTest(payload=payload):
                with self.assertRaises(InvalidInputError):
                    parse_tracker_input(payload)

    def test_source_url(self) -> None:
        result = parse_tracker_input(
            {"productQuery": "mug", "sourceUrl": " https://a.test/p "}
        )
        self.assertEqual(result.source_url, "https://a.test/p")
        blank = parse_tracker_input({"productQuery": "mug", "sourceUrl": ""})
        self.assertIsNone(blank.source_url)

    def test_max_results(self) -> None:
        """Only positive integers override the configured default."""
        cases = [(5, 5), (0, None), (-2, None), ("5", None), (True, None)]
        for raw, expected in cases:
            with self.subTest(raw=raw):
                result = parse_tracker_input(
                    {"productQuery": "mug", "maxResultsPerPlatform": raw}
                )
                self.assertEqual(result.max_results_per_platform, expected)

    def test_invalid_input_is_value_error(self) -> None:
        self.assertTrue(issubclass(InvalidInputError, ValueError))


class TestRunTracker(unittest.IsolatedAsyncioTestCase):
    """run_tracker wiring with a stubbed orchestrator."""

    async def test_response_built_from_matches(self) -> None:
        matches = empty_result_set()
        matches[Platform.SHOPIFY] = [
            Listing(
                platform=Platform.SHOPIFY,
                title="Red Mug",
                url="https://a.myshopify.com/products/red-mug",
            )
        ]
        with patch(ORCH_PATH) as mock_orch_cls:
            mock_orch_cls.return_value.run = AsyncMock(return_value=matches)
            response = await run_tracker(
                TrackerInput("red mug", "https://src.test/p"),
                config=ScraperConfig(),
            )

        mock_orch_cls.return_value.run.assert_awaited_once_with(
            "red mug", "https://src.test/p"
        )
        self.assertEqual(response.product_query, "red mug")
        self.assertEqual(response.product_page_url, "https://src.test/p")
        self.assertEqual(
            response.top_url(Platform.SHOPIFY),
            "https://a.myshopify.com/products/red-mug",
        )
        self.assertIsNone(response.top_url(Platform.AMAZON))
        self.assertEqual(response.analysis.dropshipping_probability, 0.0)

    async def test_max_results_override_applied(self) -> None:
        with patch(ORCH_PATH) as mock_orch_cls:
            mock_orch_cls.return_value.run = AsyncMock(
                return_value=empty_result_set()
            )
            await run_tracker(
                TrackerInput("mug", max_results_per_platform=3),
                config=ScraperConfig(max_results_per_platform=10),
            )

        config = mock_orch_cls.call_args.args[0]
        self.assertEqual(config.max_results_per_platform, 3)

    async def test_non_positive_override_ignored(self) -> None:
        """A directly built input with a zero cap keeps the configured one."""
        with patch(ORCH_PATH) as mock_orch_cls:
            mock_orch_cls.return_value.run = AsyncMock(
                return_value=empty_result_set()
            )
            await run_tracker(
                TrackerInput("mug", max_results_per_platform=0),
                config=ScraperConfig(max_results_per_platform=4),
            )

        config = mock_orch_cls.call_args.args[0]
        self.assertEqual(config.max_results_per_platform, 4)

    async def test_config_from_environment(self) -> None:
        """Without an explicit config the environment is consulted."""
        with patch(ORCH_PATH) as mock_orch_cls, patch.dict(
            "os.environ", {"MAX_RESULTS_PER_PLATFORM": "7"}
        ):
            mock_orch_cls.return_value.run = AsyncMock(
                return_value=empty_result_set()
            )
            await run_tracker(TrackerInput("mug"))

        config = mock_orch_cls.call_args.args[0]
        self.assertEqual(config.max_results_per_platform, 7)

    async def test_default_proxy_from_environment(self) -> None:
        with patch(ORCH_PATH) as mock_orch_cls:
            mock_orch_cls.return_value.run = AsyncMock(
                return_value=empty_result_set()
            )
            await run_tracker(TrackerInput("mug"), config=ScraperConfig())

        self.assertIsInstance(
            mock_orch_cls.call_args.args[1], EnvProxyResolver
        )


if __name__ == "__main__":
    unittest.main()
