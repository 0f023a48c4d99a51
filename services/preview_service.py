"""
Local preview copies of submitted images.
"""
import logging
import os
import tempfile
from typing import Optional

import aiofiles

from utils.storage_utils import extension_for_mime


class LocalPreview:
    """
    A temporary on-disk copy of the submitted image, used as the
    ``local_handle`` of an UploadedImage until the session is reset.
    """

    def __init__(self, path: str, logger: Optional[logging.Logger] = None):
        self.path = path
        self.logger = logger or logging.getLogger(__name__)
        self._released = False

    @classmethod
    async def create(
        cls,
        data: bytes,
        mime_type: str,
        folder: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "LocalPreview":
        fd, path = tempfile.mkstemp(
            prefix="whiteboard-preview-",
            suffix=f".{extension_for_mime(mime_type)}",
            dir=folder,
        )
        os.close(fd)
        async with aiofiles.open(path, "wb") as f:
            await f.write(data)
        return cls(path, logger)

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Delete the preview file. Safe to call more than once."""
        if self._released:
            return
        self._released = True
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning(f"Could not remove preview {self.path}: {e}")
