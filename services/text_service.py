"""
Contract for the text-extraction collaborator.

The pipeline only consumes a text string; how it is produced is up to the
implementation plugged in here.
"""
from abc import ABC, abstractmethod
from typing import Optional

from schemas.models import UploadedImage


class TextExtractor(ABC):
    """Supplies the text shown on the generated slides."""

    @abstractmethod
    async def extract(self, image: UploadedImage) -> Optional[str]:
        """
        Return the text found on the whiteboard image.

        Returns:
            Extracted text, or None/empty when nothing was found
        """
        raise NotImplementedError


class StaticTextExtractor(TextExtractor):
    """Returns text supplied up front, e.g. typed by the user or read from a file."""

    def __init__(self, text: Optional[str] = None):
        self.text = text

    async def extract(self, image: UploadedImage) -> Optional[str]:
        return self.text
