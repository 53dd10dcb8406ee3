"""Pytest configuration.

A single `QApplication` is created for the whole session as early as possible
so that modules importing PySide6 at collection time never run without one.
"""

from __future__ import annotations

import os
from typing import Any

import numpy as np
import pytest

# Headless environments have no display; use Qt's offscreen platform unless overridden.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

_APP: Any | None = None


def pytest_configure(config) -> None:  # noqa: ARG001
    """Ensure a QApplication exists before collecting/running tests."""

    # Import lazily so non-Qt environments can still import this conftest.
    try:
        from PySide6.QtWidgets import QApplication
    except ImportError:
        return

    global _APP

    app = QApplication.instance()
    if app is None:
        # Keep a strong ref so it isn't GC'd mid-session.
        _APP = QApplication([])
    else:
        _APP = app


def pytest_sessionfinish(session, exitstatus) -> None:  # noqa: ARG001
    """Attempt a clean Qt shutdown to avoid lingering threads at interpreter exit."""

    try:
        from PySide6.QtWidgets import QApplication
    except ImportError:
        return

    app = QApplication.instance()
    if app is None:
        return

    app.quit()
    app.processEvents()


def _fake_decode(blob):
    """Decode stand-in: b"bad" fails, anything else becomes a 1x1 pixel of its first byte."""
    if blob.data == b"bad":
        return blob.name, None, "corrupt data"
    return blob.name, np.full((1, 1, 3), blob.data[0], dtype=np.uint8), None


@pytest.fixture
def make_blob():
    from image_browser.image_engine.decoder import FileBlob

    def _make(name: str, data: bytes = b"\x01", media_type: str = "image/png") -> FileBlob:
        return FileBlob(name=name, media_type=media_type, data=data)

    return _make


@pytest.fixture
def make_handle():
    from image_browser.image_engine.decoder import ImageHandle

    def _make(name: str) -> ImageHandle:
        return ImageHandle(name, "image/png", np.zeros((2, 3, 3), dtype=np.uint8))

    return _make


@pytest.fixture
def loader():
    from image_browser.image_engine.loader import BatchLoader

    ld = BatchLoader(_fake_decode, max_workers=4)
    yield ld
    ld.shutdown()


@pytest.fixture
def fake_decode():
    return _fake_decode
