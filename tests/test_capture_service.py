"""
Tests for camera capture and its resource release.
"""
import asyncio
from io import BytesIO
from unittest.mock import MagicMock

import pytest
from PIL import Image

from conftest import FakeDevice, FakeStream
from services.capture_service import CAPTURE_FILE_NAME, CameraCapture
from utils.exceptions import CaptureError


@pytest.mark.asyncio
async def test_capture_returns_jpeg_and_releases_tracks():
    device = FakeDevice()

    async with CameraCapture(device) as camera:
        data, metadata = await camera.capture()
        assert not camera.active

    assert device.stream.all_stopped()
    assert metadata.mime_type == "image/jpeg"
    assert metadata.file_name == CAPTURE_FILE_NAME
    assert metadata.size_bytes == len(data)
    assert Image.open(BytesIO(data)).format == "JPEG"


@pytest.mark.asyncio
async def test_frame_error_releases_tracks():
    device = FakeDevice(FakeStream(error=RuntimeError("sensor")))

    with pytest.raises(CaptureError):
        async with CameraCapture(device) as camera:
            await camera.capture()

    assert device.stream.all_stopped()


@pytest.mark.asyncio
async def test_cancel_releases_tracks_once():
    device = FakeDevice(FakeStream(gate=asyncio.Event()))
    camera = CameraCapture(device)
    await camera.start()

    camera.cancel()
    camera.release()

    assert device.stream.all_stopped()
    assert not camera.active


@pytest.mark.asyncio
async def test_device_failure_is_capture_error():
    camera = CameraCapture(FakeDevice(error=PermissionError("denied")), logger=MagicMock())

    with pytest.raises(CaptureError):
        await camera.start()
    assert not camera.active


@pytest.mark.asyncio
async def test_capture_without_start_fails():
    with pytest.raises(CaptureError):
        await CameraCapture(FakeDevice()).capture()
