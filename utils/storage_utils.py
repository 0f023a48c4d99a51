"""Helpers for building storage paths."""

import mimetypes
import secrets
import time
from typing import Optional

# Extensions for the image types the uploader is expected to see
_IMAGE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


def current_timestamp_ms() -> int:
    return int(time.time() * 1000)


def extension_for_mime(mime_type: str, fallback: str = "bin") -> str:
    """Return a file extension (without the dot) for an image MIME type."""
    normalized = (mime_type or "").split(";")[0].strip().lower()
    if normalized in _IMAGE_EXTENSIONS:
        return _IMAGE_EXTENSIONS[normalized]
    guessed = mimetypes.guess_extension(normalized) if normalized else None
    return guessed.lstrip(".") if guessed else fallback


def build_upload_path(mime_type: str, timestamp_ms: Optional[int] = None) -> str:
    """
    Build a collision-resistant object path for an uploaded image.

    Combines a millisecond timestamp with a random token, e.g.
    ``1718000000000-k3J9xQ2mW1pZ.jpg``.
    """
    stamp = timestamp_ms if timestamp_ms is not None else current_timestamp_ms()
    token = secrets.token_urlsafe(9)
    return f"{stamp}-{token}.{extension_for_mime(mime_type)}"


def build_export_basename(timestamp_ms: int) -> str:
    """Basename shared by the presentation and PDF of one export."""
    return f"slide_{timestamp_ms}"
