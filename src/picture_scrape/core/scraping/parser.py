"""HTML parsing helpers: image candidate extraction.
"""

from __future__ import annotations

from typing import List

from bs4 import BeautifulSoup

from picture_scrape.core.scraping.detector import is_image
from picture_scrape.core.scraping.resolver import resolve, resolve_style_url


def extract_image_candidates(
    html: str, domain: str, protocol: str, style_selector: str = "td[style]"
) -> List[str]:
    """Extract image URLs from HTML, in two passes.

    - `img[src]` values are resolved and kept only if they look like images.
    - `url(...)` backgrounds of elements matching `style_selector` are
      resolved as domain-relative paths and kept without the image check.

    Elements without a usable attribute are skipped. Duplicates are kept;
    deduplication happens once the whole page has been scanned.
    """
    soup = BeautifulSoup(html, "html.parser")
    found: List[str] = []

    for img in soup.find_all("img"):
        src = img.get("src")
        if not src:
            continue
        full = resolve(str(src), domain, protocol)
        if is_image(full):
            found.append(full)

    for el in soup.select(style_selector):
        full = resolve_style_url(str(el.get("style") or ""), domain, protocol)
        if full is not None:
            found.append(full)

    return found
