# tests/test_http_client.py

"""Tests for FetchClient failure mapping and proxy handling."""

import unittest
from unittest.mock import MagicMock, PropertyMock, patch

from product_tracker.scrapers.http_client import FetchClient, FetchError
from product_tracker.scrapers.proxy import StaticProxyResolver

SESSION_PATH = "product_tracker.scrapers.http_client.curl_requests.Session"


def _resp(status: int, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    return resp


@patch(SESSION_PATH)
class TestFetchClient(unittest.TestCase):
    """FetchClient.fetch returns a body or a FetchError, never raises."""

    def test_success_returns_body(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """A 200 response returns its text."""
        mock_session_cls.return_value.get.return_value = _resp(
            200, "<html>ok</html>"
        )
        client = FetchClient()
        self.assertEqual(
            client.fetch("https://example.com", {}, 1000),
            "<html>ok</html>",
        )

    def test_session_impersonates_browser(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """The session is created with browser impersonation."""
        FetchClient()
        self.assertIn("impersonate", mock_session_cls.call_args.kwargs)

    def test_transient_status(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """503 maps to a transient FetchError carrying the status."""
        mock_session_cls.return_value.get.return_value = _resp(503)
        result = FetchClient().fetch("https://example.com", {}, 1000)

        self.assertIsInstance(result, FetchError)
        assert isinstance(result, FetchError)
        self.assertEqual(result.status, 503)
        self.assertTrue(result.is_transient)

    def test_non_transient_status(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """404 is a failure but not a transient one."""
        mock_session_cls.return_value.get.return_value = _resp(404)
        result = FetchClient().fetch("https://example.com", {}, 1000)

        assert isinstance(result, FetchError)
        self.assertEqual(result.status, 404)
        self.assertFalse(result.is_transient)

    def test_exception_becomes_fetch_error(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """Transport exceptions are returned, not raised."""
        mock_session_cls.return_value.get.side_effect = TimeoutError(
            "Operation timed out after 1000 ms"
        )
        result = FetchClient().fetch("https://example.com", {}, 1000)

        assert isinstance(result, FetchError)
        self.assertIsNone(result.status)
        self.assertIn("timed out", result.message)
        self.assertFalse(result.is_transient)

    def test_non_positive_timeout_rejected(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """timeout_ms must be > 0."""
        with self.assertRaises(ValueError):
            FetchClient().fetch("https://example.com", {}, 0)

    def test_static_proxy_passed_to_session(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """A resolved proxy is used for both schemes."""
        mock_session = mock_session_cls.return_value
        mock_session.get.return_value = _resp(200, "x")

        client = FetchClient(StaticProxyResolver("http://p.local:3128"))
        client.fetch("https://example.com", {}, 1000)

        self.assertEqual(
            mock_session.get.call_args.kwargs["proxies"],
            {"http": "http://p.local:3128", "https": "http://p.local:3128"},
        )

    def test_proxy_resolved_once_across_fetches(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """Repeated fetches reuse the first resolution."""
        mock_session_cls.return_value.get.return_value = _resp(200, "x")
        resolver = MagicMock()
        resolver.resolve.return_value = None

        client = FetchClient(resolver)
        for _ in range(3):
            client.fetch("https://example.com", {}, 1000)

        resolver.resolve.assert_called_once()
        self.assertIsNone(client.proxy)

    def test_undecodable_body_becomes_fetch_error(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """A 200 whose charset cannot decode the body is a failure."""
        resp = MagicMock()
        resp.status_code = 200
        type(resp).text = PropertyMock(
            side_effect=UnicodeDecodeError(
                "utf-8", b"\xa3 12.99", 0, 1, "invalid start byte"
            )
        )
        mock_session_cls.return_value.get.return_value = resp

        result = FetchClient().fetch("https://example.com", {}, 1000)

        assert isinstance(result, FetchError)
        self.assertEqual(result.status, 200)
        self.assertIn("Undecodable body", result.message)
        self.assertFalse(result.is_transient)

    def test_close_releases_session(
        self, mock_session_cls: MagicMock,
    ) -> None:
        FetchClient().close()
        mock_session_cls.return_value.close.assert_called_once()
