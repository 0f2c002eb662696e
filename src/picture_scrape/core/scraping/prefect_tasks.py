"""Prefect tasks wrapping the scraping components.

Each task is a thin adapter that calls the core (protocol probe, scrape,
download) and adds run logs. The page scrape has no retries: a failed fetch
is reported back to the flow with whatever was collected.
"""

from __future__ import annotations

from typing import List, Optional

from prefect import get_run_logger, task

from picture_scrape.core.config import ScrapeSettings
from picture_scrape.core.scraping.downloader import Downloader
from picture_scrape.core.scraping.probe import ensure_protocol
from picture_scrape.core.scraping.scraper import ScrapeResult, scrape


@task(name="ensure_protocol", retries=0)
def ensure_protocol_task(url: str, timeout: float = 2.0) -> str:
    logger = get_run_logger()
    resolved = ensure_protocol(url, timeout=timeout)
    if resolved != url:
        logger.info("Using %s for %s", resolved, url)
    return resolved


@task(name="scrape_images", retries=0)
def scrape_images_task(
    domain: str, page_url: str, settings: Optional[ScrapeSettings] = None
) -> ScrapeResult:
    logger = get_run_logger()
    logger.info("Scraping images from %s (domain=%s)", page_url, domain)
    result = scrape(domain, page_url, settings=settings)
    if result.error is not None:
        logger.error("Scrape of %s failed: %s", page_url, result.error)
    logger.info("Found %d pictures on %s", len(result.urls), page_url)
    return result


@task(name="download_image", retries=2, retry_delay_seconds=5)
def download_image_task(image_url: str, dest_dir: str = "data") -> str:
    logger = get_run_logger()
    with Downloader() as d:
        info = d.download(image_url, dest_dir)
    logger.info("Saved image %s (size=%s bytes)", info.get("path"), info.get("size"))
    return info.get("path") or ""


@task(name="download_all_images", retries=0)
def download_all_task(
    image_urls: List[str], dest_dir: str = "data", max_workers: int = 4
) -> List[dict]:
    logger = get_run_logger()
    with Downloader() as d:
        infos = d.download_all(image_urls, dest_dir, max_workers=max_workers)
    logger.info(
        "Downloaded %d of %d images into %s", len(infos), len(image_urls), dest_dir
    )
    return infos
