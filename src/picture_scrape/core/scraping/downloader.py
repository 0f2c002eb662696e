"""
Downloader: saves scraped images to disk.

- images are streamed in 8 KiB chunks, so large files never sit in memory;
- a SHA-256 is computed while writing, to check the file later;
- the file name comes from the URL path (`unknown.jpg` when there is none);
- `download_all` saves a batch through a small thread pool, so a page with
  hundreds of images does not open hundreds of sockets against one host.

Image URLs often live on CDNs, so the fetcher used here is not restricted
to the scraped domain.
"""

from __future__ import annotations

import hashlib
import logging
import os
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, List, Optional, Sequence
from urllib.parse import urlparse

import requests

from picture_scrape.core.errors import DownloadError, ScrapeError
from picture_scrape.core.scraping.detector import ImageType, content_image_type
from picture_scrape.core.scraping.fetcher import Fetcher

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "unknown.jpg"
FILE_MODE = 0o665


def unique_filenames(urls: Sequence[str]) -> List[str]:
    """Name every URL of a batch, suffixing repeats: logo.png, logo-1.png, ...

    Files saved from one batch never share a path, even when several URLs end
    in the same segment.
    """
    taken = set()
    names: List[str] = []
    for url in urls:
        name = Downloader.filename_from_url(url)
        stem, suffix = Path(name).stem, Path(name).suffix
        candidate = name
        n = 0
        while candidate in taken:
            n += 1
            candidate = f"{stem}-{n}{suffix}"
        taken.add(candidate)
        names.append(candidate)
    return names


class Downloader:
    """Download single images or batches and return metadata dicts.

    The class optionally receives a `Fetcher` (which wraps the HTTP calls),
    so tests can inject a fake one returning canned responses. A fetcher
    created here is owned by the downloader and closed by `close()`; an
    injected one is left to its caller. Unlike the page scrape, image
    downloads retry transient 5xx answers `retries` times.
    """

    def __init__(self, fetcher: Fetcher | None = None, retries: int = 2):
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or Fetcher(retries=retries)

    def __enter__(self) -> "Downloader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_fetcher:
            self.fetcher.close()

    @staticmethod
    def filename_from_url(url: str) -> str:
        """Return the last path segment of `url`.

        - https://example.com/img/cat.png -> 'cat.png'
        - https://example.com/ -> 'unknown.jpg'
        """
        try:
            name = Path(urlparse(url).path).name
        except ValueError:
            name = ""
        return name or DEFAULT_FILENAME

    def download(
        self, url: str, dest_dir: str = "data", filename: Optional[str] = None
    ) -> Dict[str, str]:
        """Stream `url` into `dest_dir/<filename>` and return its metadata.

        Bytes go to `<filename>.part` first and are moved into place only once
        the whole body has arrived, so a failed download leaves no file behind.
        Raises `DownloadError` on HTTP or file system failures.
        """
        out_dir = Path(dest_dir)
        out_path = out_dir / (filename or self.filename_from_url(url))
        part_path = out_path.with_name(out_path.name + ".part")
        try:
            out_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DownloadError(f"Cannot create {out_dir}: {exc}") from exc

        try:
            resp = self.fetcher.stream_get(url)
        except ScrapeError as exc:
            raise DownloadError(f"Failed to download {url}: {exc}") from exc

        hasher = hashlib.sha256()
        total = 0
        with resp as r:
            try:
                r.raise_for_status()
            except requests.HTTPError as exc:
                raise DownloadError(f"Failed to download {url}: {exc}") from exc
            try:
                with open(part_path, "wb") as fh:
                    for chunk in r.iter_content(chunk_size=8192):
                        if not chunk:
                            continue
                        fh.write(chunk)
                        hasher.update(chunk)
                        total += len(chunk)
                os.replace(part_path, out_path)
            except (OSError, requests.RequestException) as exc:
                part_path.unlink(missing_ok=True)
                raise DownloadError(
                    f"Failed to save {url} to {out_path}: {exc}"
                ) from exc

        if sys.platform.startswith("linux"):
            try:
                os.chmod(out_path, FILE_MODE)
            except OSError as exc:
                logger.warning("Failed to set permissions on %s: %s", out_path, exc)

        return {
            "path": str(out_path),
            "url": url,
            "sha256": hasher.hexdigest(),
            "size": str(total),
            "status_code": str(resp.status_code),
        }

    def download_all(
        self, urls: Sequence[str], dest_dir: str = "data", max_workers: int = 4
    ) -> List[Dict[str, str]]:
        """Download every URL with at most `max_workers` requests in flight.

        File names are made unique before any worker starts. Failures are
        logged and skipped; results keep the input order.
        """

        def _one(job) -> Optional[Dict[str, str]]:
            url, filename = job
            try:
                return self.download(url, dest_dir, filename=filename)
            except DownloadError as exc:
                logger.warning("%s", exc)
                return None

        jobs = list(zip(urls, unique_filenames(urls)))
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(_one, jobs))
        return [info for info in results if info is not None]

    def fetch_gif(self, url: str) -> bytes:
        """Load a GIF into memory, refusing anything the server does not call a GIF."""
        try:
            resp = self.fetcher.get(url)
        except ScrapeError as exc:
            raise DownloadError(f"Failed to load {url}: {exc}") from exc
        with resp:
            if resp.status_code != 200:
                raise DownloadError(
                    f"HTTP request failed with status code {resp.status_code}"
                )
            content_type = resp.headers.get("Content-Type", "")
            if content_image_type(content_type) is not ImageType.GIF:
                raise DownloadError(
                    f"expected image/gif content type, got {content_type}"
                )
            return resp.content
