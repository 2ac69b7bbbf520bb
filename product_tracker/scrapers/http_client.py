# product_tracker/scrapers/http_client.py

"""Single-GET fetch client over a browser-impersonating session."""

import logging
from dataclasses import dataclass

from curl_cffi import requests as curl_requests

from product_tracker.config.settings import Settings
from product_tracker.scrapers.proxy import NoProxyResolver, ProxyResolver


@dataclass(frozen=True)
class FetchError:
    """A failed fetch: an HTTP status when one was received, else None."""

    status: int | None
    message: str

    @property
    def is_transient(self) -> bool:
        """True for rate-limit / overload statuses (429, 503)."""
        return self.status in Settings.TRANSIENT_STATUSES


class FetchClient:
    """GET pages through one reusable curl_cffi session.

    The proxy is resolved lazily on the first fetch and cached for
    the lifetime of the client.  No exception escapes :meth:`fetch`;
    every failure is returned as a :class:`FetchError`.
    """

    def __init__(
        self,
        proxy_resolver: ProxyResolver | None = None,
        tag: str = "http",
    ) -> None:
        self.tag = tag
        self.logger = logging.getLogger("product_tracker.http")
        self.proxy_resolver: ProxyResolver = (
            proxy_resolver or NoProxyResolver()
        )
        self.session = curl_requests.Session(
            impersonate=Settings.IMPERSONATE_BROWSER
        )
        self._proxy: str | None = None
        self._proxy_resolved: bool = False

    @property
    def proxy(self) -> str | None:
        """The resolved proxy URL (resolved at most once)."""
        if not self._proxy_resolved:
            self._proxy_resolved = True
            try:
                self._proxy = self.proxy_resolver.resolve()
            except Exception as exc:
                self.logger.warning(
                    "[%s] Proxy resolution failed, "
                    "connecting directly: %s",
                    self.tag,
                    exc,
                )
                self._proxy = None
            if self._proxy:
                self.logger.info("[%s] Using forward proxy", self.tag)
        return self._proxy

    def close(self) -> None:
        """Release the underlying curl session."""
        self.session.close()

    def fetch(
        self,
        url: str,
        headers: dict[str, str],
        timeout_ms: int,
    ) -> str | FetchError:
        """GET *url* and return the body text or a :class:`FetchError`."""
        if timeout_ms <= 0:
            msg = f"timeout_ms must be positive, got {timeout_ms}"
            raise ValueError(msg)

        proxy = self.proxy
        proxies = {"http": proxy, "https": proxy} if proxy else None
        try:
            resp = self.session.get(
                url,
                headers=headers,
                timeout=timeout_ms / 1000,
                proxies=proxies,
            )
        except Exception as exc:
            return FetchError(status=None, message=str(exc))

        if not 200 <= resp.status_code < 300:
            return FetchError(
                status=resp.status_code,
                message=f"HTTP {resp.status_code}",
            )
        try:
            return resp.text or ""
        except (UnicodeDecodeError, LookupError) as exc:
            return FetchError(
                status=resp.status_code,
                message=f"Undecodable body: {exc}",
            )
