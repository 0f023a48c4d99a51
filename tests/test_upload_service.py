"""
Tests for image validation and upload.
"""
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from schemas.models import UploadMetadata
from services.upload_service import UploadCoordinator
from utils.exceptions import TransferError, ValidationError, ValidationReason

MB = 1024 * 1024


def _mock_store():
    store = MagicMock()
    store.upload_object = AsyncMock()
    store.get_public_url = MagicMock(return_value="https://example.com/img.png")
    return store


@pytest.mark.asyncio
async def test_oversized_image_never_reaches_store():
    store = _mock_store()
    coordinator = UploadCoordinator(store, bucket="images")
    data = b"\0" * (20 * MB)

    with pytest.raises(ValidationError) as excinfo:
        await coordinator.upload(data, UploadMetadata(mime_type="image/jpeg", size_bytes=len(data)))

    assert excinfo.value.reason is ValidationReason.SIZE_EXCEEDED
    store.upload_object.assert_not_called()


@pytest.mark.asyncio
async def test_non_image_type_is_rejected():
    store = _mock_store()
    coordinator = UploadCoordinator(store, bucket="images")

    with pytest.raises(ValidationError) as excinfo:
        await coordinator.upload(b"%PDF", UploadMetadata(mime_type="application/pdf", size_bytes=4))

    assert excinfo.value.reason is ValidationReason.INVALID_TYPE
    store.upload_object.assert_not_called()


def test_declared_size_over_limit_is_rejected():
    coordinator = UploadCoordinator(_mock_store(), max_bytes=10)

    with pytest.raises(ValidationError) as excinfo:
        coordinator.validate(b"tiny", UploadMetadata(mime_type="image/png", size_bytes=11))

    assert excinfo.value.reason is ValidationReason.SIZE_EXCEEDED


def test_image_exactly_at_limit_is_accepted():
    coordinator = UploadCoordinator(_mock_store(), max_bytes=10)
    coordinator.validate(b"0123456789", UploadMetadata(mime_type="image/png", size_bytes=10))


def test_uncommon_image_type_is_accepted_with_warning():
    logger = MagicMock()
    coordinator = UploadCoordinator(_mock_store(), logger=logger)

    coordinator.validate(b"GIF89a", UploadMetadata(mime_type="image/gif", size_bytes=6))

    logger.warning.assert_called_once()


@pytest.mark.asyncio
async def test_upload_stores_identical_bytes_under_unique_path(fs_store, png_bytes):
    await fs_store.get_or_create_bucket("images")
    coordinator = UploadCoordinator(fs_store, bucket="images")
    metadata = UploadMetadata(mime_type="image/png", size_bytes=len(png_bytes), file_name="board.png")

    first = await coordinator.upload(png_bytes, metadata)
    second = await coordinator.upload(png_bytes, metadata)

    assert first != second
    assert first.endswith(".png")
    stored = Path(fs_store.root, "images").glob("*.png")
    assert [p.read_bytes() for p in stored] == [png_bytes, png_bytes]


@pytest.mark.asyncio
async def test_path_collision_is_a_transfer_error(fs_store, png_bytes):
    await fs_store.get_or_create_bucket("images")
    coordinator = UploadCoordinator(fs_store, bucket="images")
    metadata = UploadMetadata(mime_type="image/png", size_bytes=len(png_bytes))

    with patch("services.upload_service.build_upload_path", return_value="fixed.png"):
        await coordinator.upload(png_bytes, metadata)
        with pytest.raises(TransferError):
            await coordinator.upload(png_bytes, metadata)
