"""
Camera capture as an image source for the pipeline.

A CameraCapture owns the media stream it opens. The stream is never handed
out; every exit path (capture, cancel, error, context exit) stops all of
its tracks.
"""
import logging
from abc import ABC, abstractmethod
from io import BytesIO
from typing import List, Optional, Tuple

from PIL import Image

from schemas.models import UploadMetadata
from utils.exceptions import CaptureError

CAPTURE_FILE_NAME = "camera-capture.jpg"
CAPTURE_MIME_TYPE = "image/jpeg"


class MediaTrack(ABC):
    @abstractmethod
    def stop(self) -> None:
        pass


class MediaStream(ABC):
    """A live camera stream made of one or more tracks."""

    @abstractmethod
    def get_tracks(self) -> List[MediaTrack]:
        pass

    @abstractmethod
    async def read_frame(self) -> Image.Image:
        """Grab the current video frame."""
        pass


class MediaDevice(ABC):
    """Something that can open a camera stream."""

    @abstractmethod
    async def open_stream(self) -> MediaStream:
        pass


class CameraCapture:
    """
    Scoped access to a camera device.

    Usage::

        async with CameraCapture(device) as camera:
            data, metadata = await camera.capture()
    """

    def __init__(
        self,
        device: MediaDevice,
        jpeg_quality: int = 95,
        logger: Optional[logging.Logger] = None,
    ):
        self.device = device
        self.jpeg_quality = jpeg_quality
        self.logger = logger or logging.getLogger(__name__)
        self._stream: Optional[MediaStream] = None

    @property
    def active(self) -> bool:
        return self._stream is not None

    async def start(self) -> None:
        if self._stream is not None:
            return
        try:
            self._stream = await self.device.open_stream()
        except Exception as e:
            self.logger.error(f"Error accessing camera: {e}")
            raise CaptureError(f"Unable to access camera: {e}") from e
        self.logger.info("Camera stream started")

    async def capture(self) -> Tuple[bytes, UploadMetadata]:
        """
        Grab one frame as a JPEG and release the camera.

        Returns:
            Tuple of (jpeg bytes, upload metadata for them)

        Raises:
            CaptureError: If the camera is not started or the frame cannot be read
        """
        if self._stream is None:
            raise CaptureError("Camera is not started")
        try:
            frame = await self._stream.read_frame()
            data = self._encode(frame)
        except CaptureError:
            raise
        except Exception as e:
            self.logger.error(f"Error capturing frame: {e}")
            raise CaptureError(f"Could not capture image: {e}") from e
        finally:
            self.release()

        return data, UploadMetadata(
            mime_type=CAPTURE_MIME_TYPE,
            size_bytes=len(data),
            file_name=CAPTURE_FILE_NAME,
        )

    def _encode(self, frame: Image.Image) -> bytes:
        if frame is None:
            raise CaptureError("Camera returned no frame")
        buffer = BytesIO()
        frame.convert("RGB").save(buffer, format="JPEG", quality=self.jpeg_quality)
        return buffer.getvalue()

    def cancel(self) -> None:
        self.release()

    def release(self) -> None:
        """Stop every track of the stream. Safe to call more than once."""
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            tracks = stream.get_tracks()
        except Exception as e:
            self.logger.warning(f"Error listing camera tracks: {e}")
            tracks = []
        for track in tracks:
            try:
                track.stop()
            except Exception as e:
                self.logger.warning(f"Error stopping camera track: {e}")
        self.logger.info("Camera stream released")

    async def __aenter__(self) -> "CameraCapture":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.release()
