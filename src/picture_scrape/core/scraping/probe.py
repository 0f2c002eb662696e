"""Helpers that turn user input into a scrape target.

`ensure_protocol` guesses the scheme of a bare host, `get_domain` extracts
the host that the scrape will be restricted to.
"""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from picture_scrape.core.errors import FetchError
from picture_scrape.core.scraping.fetcher import Fetcher

logger = logging.getLogger(__name__)


def _answers_ok(fetcher: Fetcher, url: str) -> bool:
    try:
        resp = fetcher.get(url)
    except FetchError as exc:
        logger.debug("Probe %s failed: %s", url, exc)
        return False
    resp.close()
    return resp.status_code == 200


def ensure_protocol(url_str: str, timeout: float = 2.0) -> str:
    """Return `url_str` with a scheme, trying https first, then http.

    Strings that already start with `http://` or `https://` are returned as
    they are. If neither probe answers HTTP 200 the input is returned
    unchanged.
    """
    if url_str.startswith("http://") or url_str.startswith("https://"):
        return url_str

    with Fetcher(timeout=timeout) as f:
        for candidate in (f"https://{url_str}", f"http://{url_str}"):
            if _answers_ok(f, candidate):
                return candidate

    return url_str


def get_domain(url_str: str) -> str:
    """Return the hostname of `url_str`, or "" if it cannot be parsed."""
    try:
        return urlparse(url_str).hostname or ""
    except ValueError as exc:
        logger.error("Error parsing URL %s: %s", url_str, exc)
        return ""
