"""
Tests for the command line entry point.
"""
import logging
import os
from unittest.mock import patch

import pytest

from conftest import make_image_bytes
from config.settings import StoreConfig
from main import main_async
from utils.logging_utils import setup_logging


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_setup_logging_writes_run_log(tmp_path, restore_root_logging):
    log_path = setup_logging(str(tmp_path), "run1")

    assert log_path == os.path.join(str(tmp_path), "logs", "pipeline_log_run1.txt")
    assert os.path.exists(log_path)


@pytest.mark.asyncio
async def test_main_converts_image(tmp_path, restore_root_logging, capsys):
    image_path = tmp_path / "board.png"
    image_path.write_bytes(make_image_bytes(120, 80, "PNG"))
    config = StoreConfig(local_root=str(tmp_path / "store"))

    with patch("main.get_store_config", return_value=config):
        exit_code = await main_async(
            [str(image_path), "--text", "Q1 Roadmap", "--output-folder", str(tmp_path / "out")]
        )

    assert exit_code == 0
    output = capsys.readouterr().out
    assert "Presentation:" in output
    assert "PDF:" in output
    slides = os.listdir(tmp_path / "store" / config.slides_bucket)
    assert len(slides) == 2


@pytest.mark.asyncio
async def test_main_rejects_non_image(tmp_path, restore_root_logging):
    path = tmp_path / "notes.txt"
    path.write_text("hello")
    config = StoreConfig(local_root=str(tmp_path / "store"))

    with patch("main.get_store_config", return_value=config):
        exit_code = await main_async([str(path), "--output-folder", str(tmp_path / "out")])

    assert exit_code == 1


@pytest.mark.asyncio
async def test_main_missing_file(tmp_path):
    assert await main_async([str(tmp_path / "missing.png")]) == 1
