"""HTTP fetcher restricted to one allowed domain, with a fixed user agent.

Provides a small `Fetcher` object exposing `get`, `fetch_html` and
`stream_get`. Redirects are followed by hand so every hop can be checked
against the allowed domain before it is requested.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional
from urllib.parse import urljoin, urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from picture_scrape.core.config import DEFAULT_USER_AGENT
from picture_scrape.core.errors import DisallowedDomainError, FetchError

logger = logging.getLogger(__name__)


class Fetcher:
    """Small HTTP client for scraping a single page.

    Usage:
        with Fetcher(allowed_domain="example.com", timeout=15) as f:
            html = f.fetch_html("https://example.com/gallery")

    `retries` defaults to 0: a failed page fetch is reported, not retried.
    The `Downloader` raises it so image GETs survive transient 5xx answers.
    """

    def __init__(
        self,
        allowed_domain: Optional[str] = None,
        timeout: float = 15,
        user_agent: str = DEFAULT_USER_AGENT,
        max_redirects: int = 5,
        retries: int = 0,
        backoff_factor: float = 0.3,
    ) -> None:
        self.allowed_domain = allowed_domain.lower() if allowed_domain else None
        self.timeout = timeout
        self.user_agent = user_agent
        self.max_redirects = max_redirects
        self.session = requests.Session()
        retry = Retry(
            total=retries,
            status_forcelist=(429, 500, 502, 503, 504) if retries else (),
            allowed_methods=frozenset(["GET"]),
            backoff_factor=backoff_factor,
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def _headers(self, headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        base = {"User-Agent": self.user_agent}
        if headers:
            base.update(headers)
        return base

    def is_allowed(self, url: str) -> bool:
        if self.allowed_domain is None:
            return True
        host = (urlparse(url).hostname or "").lower()
        return host == self.allowed_domain

    def _check_domain(self, url: str) -> None:
        if not self.is_allowed(url):
            raise DisallowedDomainError(
                f"{url} is outside the allowed domain {self.allowed_domain}", url
            )

    def _send(self, url: str, headers: Optional[Dict[str, str]], **kwargs):
        logger.info("Visiting %s", url)
        try:
            return self.session.get(
                url,
                headers=self._headers(headers),
                timeout=self.timeout,
                allow_redirects=False,
                **kwargs,
            )
        except requests.RequestException as exc:
            raise FetchError(f"GET {url} failed: {exc}", url) from exc

    def get(self, url: str, headers: Optional[Dict[str, str]] = None, **kwargs):
        """GET `url`, following redirects that stay inside the allowed domain."""
        self._check_domain(url)
        resp = self._send(url, headers, **kwargs)
        hops = 0
        while resp.is_redirect:
            if hops >= self.max_redirects:
                resp.close()
                raise FetchError(f"too many redirects starting at {url}", url)
            target = urljoin(resp.url, resp.headers["location"])
            resp.close()
            self._check_domain(target)
            resp = self._send(target, headers, **kwargs)
            hops += 1
        return resp

    def fetch_html(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        """Return the body of `url`, raising `FetchError` on non-2xx."""
        resp = self.get(url, headers)
        try:
            resp.raise_for_status()
        except requests.HTTPError as exc:
            raise FetchError(
                f"GET {url} returned HTTP {resp.status_code}",
                url,
                status_code=resp.status_code,
            ) from exc
        finally:
            resp.close()
        return resp.text

    def stream_get(self, url: str, headers: Optional[Dict[str, str]] = None, **kwargs):
        # Streamed GET for downloading images
        return self.get(url, headers, stream=True, **kwargs)
