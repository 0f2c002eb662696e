"""
Bounded in-memory cache of image bytes, for whatever displays the results.

The scraping core never touches this cache. Entries are evicted least
recently used first once `max_entries` is reached; failed loads are not
cached, so the next lookup retries them.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Callable, Optional

from picture_scrape.core.errors import DownloadError, ScrapeError
from picture_scrape.core.scraping.detector import ImageType, detect_image_type
from picture_scrape.core.scraping.downloader import Downloader

logger = logging.getLogger(__name__)

Loader = Callable[[str], bytes]


def default_loader(downloader: Downloader) -> Loader:
    """Build a loader that fetches image bytes with a plain blocking GET.

    GIFs go through `Downloader.fetch_gif`, which checks the content type.
    Other responses must look like an image by Content-Type or URL suffix;
    background-style URLs reach the display unfiltered.
    """

    def _load(url: str) -> bytes:
        if detect_image_type(url) is ImageType.GIF:
            return downloader.fetch_gif(url)
        resp = downloader.fetcher.get(url)
        with resp:
            if resp.status_code != 200:
                raise DownloadError(
                    f"HTTP request failed with status code {resp.status_code}"
                )
            content_type = resp.headers.get("Content-Type")
            if detect_image_type(url, content_type) is ImageType.UNKNOWN:
                raise DownloadError(f"{url} is not an image ({content_type})")
            return resp.content

    return _load


class ImageCache:
    """LRU map of URL -> image bytes.

    Usage:
        with ImageCache(max_entries=64) as cache:
            data = cache.get_or_load("https://example.com/a.png")

    Without a `loader`, images are loaded through `downloader`. A downloader
    created here is closed by `close()`; an injected one belongs to the caller.
    """

    def __init__(
        self,
        loader: Optional[Loader] = None,
        max_entries: int = 128,
        downloader: Optional[Downloader] = None,
    ):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._owned_downloader: Optional[Downloader] = None
        if loader is None:
            if downloader is None:
                downloader = self._owned_downloader = Downloader()
            loader = default_loader(downloader)
        self.loader = loader
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, bytes]" = OrderedDict()
        self._lock = threading.Lock()

    def __enter__(self) -> "ImageCache":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, url: object) -> bool:
        return url in self._entries

    def get_or_load(self, url: str) -> Optional[bytes]:
        """Return cached bytes for `url`, loading them on a miss.

        Returns None when the image cannot be loaded; the caller shows a
        placeholder.
        """
        with self._lock:
            if url in self._entries:
                self._entries.move_to_end(url)
                return self._entries[url]

        try:
            data = self.loader(url)
        except ScrapeError as exc:
            logger.warning("Failed to load resource from URL %s: %s", url, exc)
            return None

        with self._lock:
            self._entries[url] = data
            self._entries.move_to_end(url)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
        return data

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def close(self) -> None:
        """Drop cached images and release the HTTP session this cache opened."""
        self.clear()
        if self._owned_downloader is not None:
            self._owned_downloader.close()
