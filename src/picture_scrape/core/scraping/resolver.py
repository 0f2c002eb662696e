"""Turn raw `src` / CSS `url(...)` references into absolute URLs.

Resolution is plain string concatenation: no percent-encoding, no `..`
collapsing and no query handling.
"""

from __future__ import annotations

import re
from typing import Optional

STYLE_URL_RE = re.compile(r"url\((.*?)\)")


def get_protocol(page_url: str) -> str:
    """Return the protocol used to resolve references found on `page_url`."""
    if page_url.startswith("https"):
        return "https"
    return "http"


def resolve(raw_ref: str, domain: str, protocol: str) -> str:
    """Resolve an `img[src]` value against the scraped domain.

    - `//cdn.example.com/a.png` -> `<protocol>://cdn.example.com/a.png`
    - `http...` -> unchanged
    - anything containing `domain` -> `<protocol>://<raw_ref>`
    - anything else -> `<protocol>://<domain>/<raw_ref>`
    """
    if raw_ref.startswith("//"):
        return f"{protocol}:{raw_ref}"
    if raw_ref.startswith("http"):
        return raw_ref
    if domain in raw_ref:
        # relative link that already carries the host
        return f"{protocol}://{raw_ref}"
    return f"{protocol}://{domain}/{raw_ref}"


def extract_style_url(style: str) -> Optional[str]:
    """Return the first `url(...)` payload of an inline style, if any."""
    m = STYLE_URL_RE.search(style or "")
    if m is None:
        return None
    return m.group(1)


def resolve_style_url(style: str, domain: str, protocol: str) -> Optional[str]:
    """Resolve a background image from an inline style.

    Style backgrounds are always treated as domain-relative paths.
    """
    captured = extract_style_url(style)
    if captured is None:
        return None
    return f"{protocol}://{domain}/{captured}"
