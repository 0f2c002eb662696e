"""Exception hierarchy shared by the scraping core and the download layer."""

from __future__ import annotations

from typing import Optional


class ScrapeError(Exception):
    """Base class for every error surfaced by picture_scrape."""


class InvalidTargetError(ScrapeError):
    """The domain/page URL pair does not describe a scrapeable page."""


class FetchError(ScrapeError):
    """The page GET failed: network error, timeout or non-2xx status."""

    def __init__(self, message: str, url: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DisallowedDomainError(FetchError):
    """A request (or redirect) pointed outside the allowed domain."""


class DownloadError(ScrapeError):
    """Saving or loading an image failed."""
