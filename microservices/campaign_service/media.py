"""
Campaign media helpers

Pure functions over blob-store public URLs: resized-image URLs for display
and (bucket, path) extraction for cleanup.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

OBJECT_SEGMENT = "/object/"
RENDER_SEGMENT = "/render/image/"


class ResizeMode(str, Enum):
    COVER = "cover"
    CONTAIN = "contain"
    FILL = "fill"


@dataclass(frozen=True)
class ImageTransform:
    """Target box of an on-the-fly resized image"""
    width: int
    height: int
    resize: Optional[ResizeMode] = None


CARD_THUMBNAIL = ImageTransform(400, 400, ResizeMode.CONTAIN)
DETAIL_PORTRAIT = ImageTransform(384, 384, ResizeMode.CONTAIN)


def transform_image_url(public_url: Optional[str], options: ImageTransform) -> str:
    """
    Rewrite a direct object URL into its render-endpoint equivalent.

    URLs without an ``/object/`` path segment, and anything that does not
    parse as an absolute URL, come back unchanged. Empty input gives ''.
    """
    if not public_url:
        return ""
    try:
        parts = urlsplit(public_url)
        if not parts.scheme or not parts.netloc:
            raise ValueError("not an absolute URL")
        if OBJECT_SEGMENT not in parts.path:
            return public_url

        path = parts.path.replace(OBJECT_SEGMENT, RENDER_SEGMENT, 1)
        params = {
            "width": str(options.width),
            "height": str(options.height),
        }
        if options.resize:
            params["resize"] = ResizeMode(options.resize).value

        query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in params]
        query.extend(params.items())
        return urlunsplit((parts.scheme, parts.netloc, path, urlencode(query), parts.fragment))
    except ValueError as e:
        logger.error(f"Invalid URL for image transformation: {public_url!r} ({e})")
        return public_url


def get_storage_info(url: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Extract (bucket, path) from ``.../object/public/<bucket>/<path>``.

    Returns None when the URL does not have that shape.
    """
    if not url:
        return None
    try:
        parts = urlsplit(url)
        if not parts.scheme or not parts.netloc:
            raise ValueError("not an absolute URL")
    except ValueError as e:
        logger.warning(f"Could not parse storage URL for cleanup: {url!r} ({e})")
        return None

    segments = parts.path.split("/")
    if "public" not in segments:
        return None
    index = segments.index("public")
    if len(segments) <= index + 2:
        return None

    bucket = segments[index + 1]
    path = "/".join(segments[index + 2:])
    if not bucket or not path:
        return None
    return bucket, path


def public_object_url(storage_url: str, bucket: str, path: str) -> str:
    """Public URL of an object in a public bucket"""
    return f"{storage_url}/object/public/{bucket}/{path}"


__all__ = [
    "ResizeMode",
    "ImageTransform",
    "CARD_THUMBNAIL",
    "DETAIL_PORTRAIT",
    "transform_image_url",
    "get_storage_info",
    "public_object_url",
]
