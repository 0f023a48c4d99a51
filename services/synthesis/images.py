"""
Fetching and decoding the uploaded image so it can be embedded in documents.

Everything here runs inside the synthesizer's executor thread, so it is
synchronous.
"""
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Optional
from urllib.parse import urlparse
from urllib.request import url2pathname

import requests
from PIL import Image, UnidentifiedImageError

from config.settings import IMAGE_FETCH_TIMEOUT
from utils.exceptions import ImageEmbedError

# Formats both python-pptx and PyMuPDF take as-is
_NATIVE_FORMATS = ("JPEG", "PNG")


@dataclass
class EmbeddableImage:
    data: bytes
    width: int
    height: int
    format: str


class ImageFetcher:
    """Resolves an image reference (http/https URL, file URI or path) to bytes."""

    def __init__(
        self,
        timeout: float = IMAGE_FETCH_TIMEOUT,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logger or logging.getLogger(__name__)

    def fetch(self, reference: str) -> bytes:
        """
        Download or read the bytes behind a reference.

        Raises:
            ImageEmbedError: If the reference cannot be resolved
        """
        if not reference:
            raise ImageEmbedError("Empty image reference")

        parsed = urlparse(reference)
        scheme = parsed.scheme.lower()

        if scheme in ("http", "https"):
            self.logger.debug(f"Fetching image {reference}")
            try:
                response = self.session.get(reference, timeout=self.timeout)
                response.raise_for_status()
            except requests.RequestException as e:
                raise ImageEmbedError(f"Could not download image {reference}: {e}") from e
            return response.content

        if scheme == "file":
            path = url2pathname(parsed.path)
        elif scheme == "":
            path = reference
        else:
            raise ImageEmbedError(f"Unsupported image reference scheme '{scheme}'")

        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            raise ImageEmbedError(f"Could not read image {path}: {e}") from e


def decode_image(data: bytes) -> EmbeddableImage:
    """
    Decode image bytes and normalise them to JPEG or PNG.

    Raises:
        ImageEmbedError: If the bytes are not a decodable image
    """
    if not data:
        raise ImageEmbedError("Image payload is empty")

    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            width, height = img.size
            image_format = (img.format or "").upper()

            if image_format in _NATIVE_FORMATS:
                payload = data
            else:
                converted = img if img.mode in ("RGB", "RGBA", "L", "LA") else img.convert("RGBA")
                buffer = BytesIO()
                converted.save(buffer, format="PNG")
                payload = buffer.getvalue()
                image_format = "PNG"
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageEmbedError(f"Could not decode image: {e}") from e

    if width <= 0 or height <= 0:
        raise ImageEmbedError(f"Image has invalid dimensions {width}x{height}")

    return EmbeddableImage(data=payload, width=width, height=height, format=image_format)
