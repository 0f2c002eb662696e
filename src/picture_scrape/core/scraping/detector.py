"""Decide whether a URL looks like an image.

Provides the `ImageType` enum, the extension allow-list used by the scraper
and `detect_image_type` for the download layer.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".bmp", ".svg")


class ImageType(str, Enum):
    PNG = "png"
    JPEG = "jpeg"
    GIF = "gif"
    BMP = "bmp"
    SVG = "svg"
    UNKNOWN = "unknown"


_BY_EXTENSION = {
    ".png": ImageType.PNG,
    ".jpg": ImageType.JPEG,
    ".jpeg": ImageType.JPEG,
    ".gif": ImageType.GIF,
    ".bmp": ImageType.BMP,
    ".svg": ImageType.SVG,
}


def is_image(url: str) -> bool:
    """Case-insensitive suffix check against `IMAGE_EXTENSIONS`.

    The query string is not stripped, so `pic.jpg?v=2` is rejected.
    """
    return url.lower().endswith(IMAGE_EXTENSIONS)


def _type_from_url(url: str) -> Optional[ImageType]:
    lowered = url.lower()
    for ext, kind in _BY_EXTENSION.items():
        if lowered.endswith(ext):
            return kind
    return None


def content_image_type(content_type: Optional[str]) -> Optional[ImageType]:
    """Map a Content-Type header to an image type, None if it names no image."""
    if not content_type:
        return None
    c = content_type.lower()
    if "image/gif" in c:
        return ImageType.GIF
    if "image/png" in c:
        return ImageType.PNG
    if "image/jpeg" in c or "image/jpg" in c:
        return ImageType.JPEG
    if "image/bmp" in c:
        return ImageType.BMP
    if "image/svg" in c:
        return ImageType.SVG
    return None


def detect_image_type(url: str, content_type: Optional[str] = None) -> ImageType:
    """Detect image type by Content-Type header, then URL suffix."""
    return (
        content_image_type(content_type) or _type_from_url(url) or ImageType.UNKNOWN
    )
