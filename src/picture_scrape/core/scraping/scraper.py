"""Single-page image scrape: fetch, parse, dedupe, cap.

`scrape` is the entry point used by flows and other callers. Errors are
returned next to whatever was collected instead of being raised, so callers
can decide whether partial results are still useful.
"""

from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional, Tuple

from pydantic import ValidationError

from picture_scrape.core.config import ScrapeSettings, ScrapeTarget
from picture_scrape.core.errors import InvalidTargetError, ScrapeError
from picture_scrape.core.scraping.dedupe import dedupe
from picture_scrape.core.scraping.fetcher import Fetcher
from picture_scrape.core.scraping.parser import extract_image_candidates
from picture_scrape.core.scraping.resolver import get_protocol

logger = logging.getLogger(__name__)


class ScrapeResult(NamedTuple):
    urls: List[str]
    error: Optional[ScrapeError] = None


def scan(
    domain: str,
    page_url: str,
    settings: Optional[ScrapeSettings] = None,
    fetcher: Optional[Fetcher] = None,
) -> Tuple[List[str], Optional[ScrapeError]]:
    """Fetch `page_url` once and return the raw image candidates.

    Only `domain` may be contacted. The returned list is not deduplicated
    and not capped; on failure it holds whatever was collected before the
    error (nothing, since there is a single GET).
    """
    settings = settings or ScrapeSettings()
    candidates: List[str] = []

    try:
        target = ScrapeTarget(domain=domain, page_url=page_url)
    except ValidationError as exc:
        return candidates, InvalidTargetError(str(exc))

    protocol = get_protocol(target.page_url)
    owns_fetcher = fetcher is None
    f = fetcher or Fetcher(
        allowed_domain=target.domain,
        timeout=settings.timeout,
        user_agent=settings.user_agent,
        max_redirects=settings.max_redirects,
    )
    try:
        html = f.fetch_html(target.page_url)
    except ScrapeError as exc:
        logger.warning("Scrape of %s failed: %s", target.page_url, exc)
        return candidates, exc
    finally:
        if owns_fetcher:
            f.close()

    candidates.extend(
        extract_image_candidates(
            html, target.domain, protocol, style_selector=settings.style_selector
        )
    )
    return candidates, None


def scrape(
    domain: str,
    page_url: str,
    settings: Optional[ScrapeSettings] = None,
    fetcher: Optional[Fetcher] = None,
) -> ScrapeResult:
    """Return the unique image URLs of one page, at most `max_images` of them.

    Usage:
        urls, err = scrape("example.com", "https://example.com/gallery")
    """
    settings = settings or ScrapeSettings()
    candidates, err = scan(domain, page_url, settings=settings, fetcher=fetcher)
    if err is not None:
        return ScrapeResult(candidates, err)

    urls = dedupe(candidates)
    if len(urls) > settings.max_images:
        logger.info(
            "Found %d images on %s, keeping the first %d",
            len(urls),
            page_url,
            settings.max_images,
        )
        urls = urls[: settings.max_images]
    return ScrapeResult(urls, None)
