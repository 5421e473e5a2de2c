"""Shared fixtures for the photostrip test suite."""
from __future__ import annotations

import io
import os
from typing import Tuple

import pytest
from PIL import Image

from photostrip.cache import ImageCache, configure_cache


@pytest.fixture(scope="session")
def qapp():
    """A headless Qt application for tests that paint or encode images."""

    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PySide6.QtGui import QGuiApplication

    app = QGuiApplication.instance() or QGuiApplication([])
    yield app


@pytest.fixture(autouse=True)
def fresh_cache():
    """Give each test its own decode cache."""

    configure_cache(ImageCache)
    yield
    configure_cache(ImageCache)


def make_png(size: Tuple[int, int] = (40, 60), color=(255, 0, 0, 255)) -> bytes:
    """Encode a solid colour PNG in memory."""

    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def png_file(tmp_path):
    path = tmp_path / "photo.png"
    path.write_bytes(make_png())
    return path


@pytest.fixture
def png():
    """Factory for in-memory PNG bytes."""

    return make_png
