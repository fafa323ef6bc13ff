"""Shared fixtures for the image-tagger tests."""

from pathlib import Path

import pytest
from PIL import Image

from image_tagger.core.shortcuts import ShortcutRegistry
from image_tagger.utils.config import Config


def make_image(path: Path, size=(64, 48), color="red") -> Path:
    """Write a small real image; the format follows the extension."""
    img = Image.new("RGB", size, color=color)
    img.save(path)
    return path


@pytest.fixture
def config(tmp_path):
    """Configuration stored under the test's temp directory."""
    return Config(tmp_path / "settings" / "config.json")


@pytest.fixture
def registry(config):
    return ShortcutRegistry(config)


@pytest.fixture
def image_dir(tmp_path):
    """Folder with two images, a text file and a subdirectory."""
    folder = tmp_path / "inbox"
    folder.mkdir()
    make_image(folder / "a.jpg")
    make_image(folder / "b.png", color="blue")
    (folder / "notes.txt").write_text("not an image")
    (folder / "nested.jpg").mkdir()  # a directory with an image-like name
    return folder
