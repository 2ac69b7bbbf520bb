# tests/conftest.py

"""Shared pytest fixtures."""

from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import pytest


@pytest.fixture(autouse=True)
def instant_backoff() -> Iterator[MagicMock]:
    """Retry backoff sleeps return immediately in every test.

    Tests that count delays patch the scraper module's ``time.sleep``
    themselves.
    """
    with patch("time.sleep") as sleep:
        yield sleep
