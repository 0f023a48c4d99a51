"""
Shared fixtures for pipeline tests.
"""
import asyncio
import logging
from io import BytesIO

import pytest
from PIL import Image

from services.capture_service import MediaDevice, MediaStream, MediaTrack
from services.storage_service import FileSystemObjectStore


def make_image_bytes(width: int = 64, height: int = 32, fmt: str = "PNG", color=(200, 30, 30)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def logger():
    return logging.getLogger("tests")


@pytest.fixture
def png_bytes():
    return make_image_bytes(64, 32, "PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes(80, 60, "JPEG")


@pytest.fixture
def fs_store(tmp_path):
    return FileSystemObjectStore(str(tmp_path / "store"))


class FakeTrack(MediaTrack):
    def __init__(self):
        self.stopped = 0

    def stop(self):
        self.stopped += 1


class FakeStream(MediaStream):
    """Camera stream that can be held open until ``gate`` is set."""

    def __init__(self, frame=None, error=None, gate=None):
        self.tracks = [FakeTrack(), FakeTrack()]
        self.frame = frame if frame is not None else Image.new("RGB", (32, 24), (10, 200, 10))
        self.error = error
        self.gate = gate
        self.reading = asyncio.Event()

    def get_tracks(self):
        return self.tracks

    def all_stopped(self) -> bool:
        return all(track.stopped == 1 for track in self.tracks)

    async def read_frame(self):
        self.reading.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.frame


class FakeDevice(MediaDevice):
    def __init__(self, stream=None, error=None):
        self.stream = stream or FakeStream()
        self.error = error

    async def open_stream(self):
        if self.error is not None:
            raise self.error
        return self.stream
