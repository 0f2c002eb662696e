"""Core scraping primitives exported for reuse across flows and callers.

This package contains small, well-tested building blocks: Fetcher, Resolver,
Detector, Parser, Dedupe, Scraper and Downloader, plus Prefect task wrappers.
"""

from .dedupe import dedupe
from .detector import (
    IMAGE_EXTENSIONS,
    ImageType,
    content_image_type,
    detect_image_type,
    is_image,
)
from .downloader import Downloader, unique_filenames
from .fetcher import Fetcher
from .parser import extract_image_candidates
from .prefect_tasks import (
    download_all_task,
    download_image_task,
    ensure_protocol_task,
    scrape_images_task,
)
from .probe import ensure_protocol, get_domain
from .resolver import extract_style_url, get_protocol, resolve, resolve_style_url
from .scraper import ScrapeResult, scan, scrape

__all__ = [
    "Fetcher",
    "resolve",
    "resolve_style_url",
    "extract_style_url",
    "get_protocol",
    "is_image",
    "detect_image_type",
    "content_image_type",
    "ImageType",
    "IMAGE_EXTENSIONS",
    "dedupe",
    "extract_image_candidates",
    "scan",
    "scrape",
    "ScrapeResult",
    "ensure_protocol",
    "get_domain",
    "Downloader",
    "unique_filenames",
    "ensure_protocol_task",
    "scrape_images_task",
    "download_image_task",
    "download_all_task",
]
