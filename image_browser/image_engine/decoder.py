"""Decode in-memory image blobs into display-ready RGB buffers.

The decoder is pure: it reads the blob's bytes and returns a new numpy array
or an error string. It never raises and never touches shared state, so it is
safe to run on any worker thread.
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass
from typing import Any

import numpy as np
from PySide6.QtGui import QImage

from image_browser.logger import get_logger

_logger = get_logger("decoder")

_RGB_CHANNELS = 3
_RGB_DIMS = 3
IMAGE_MEDIA_PREFIX = "image/"


@dataclass(frozen=True)
class FileBlob:
    """Raw file contents handed over by the file picker."""

    name: str
    media_type: str
    data: bytes


@dataclass(frozen=True)
class DecodeFailure:
    """A blob that declared an image type but could not be decoded."""

    position: int
    name: str
    error: str


@dataclass(frozen=True, eq=False)
class ImageHandle:
    """Opaque, immutable reference to decoded pixels.

    Identity is by object, not content: two visually identical files produce
    two distinct handles.
    """

    name: str
    media_type: str
    pixels: np.ndarray

    def __post_init__(self) -> None:
        # Private copy: the caller keeps a writable array and cannot alter the handle.
        arr = np.array(self.pixels, dtype=np.uint8, order="C", copy=True)
        if arr.ndim != _RGB_DIMS or arr.shape[2] != _RGB_CHANNELS:
            raise ValueError(f"expected HxWx3 pixels for {self.name}, got shape {arr.shape}")
        arr.setflags(write=False)
        object.__setattr__(self, "pixels", arr)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def to_qimage(self) -> QImage:
        """Build a displayable QImage (a detached copy of the pixels)."""
        h, w, _ = self.pixels.shape
        qimg = QImage(self.pixels.data, w, h, w * _RGB_CHANNELS, QImage.Format.Format_RGB888)
        return qimg.copy()


def is_image_media_type(media_type: str | None) -> bool:
    return bool(media_type) and media_type.strip().lower().startswith(IMAGE_MEDIA_PREFIX)


_pyvips: Any | None = None


def _get_pyvips_module() -> Any:
    global _pyvips
    if _pyvips is None:
        import pyvips  # type: ignore

        _pyvips = pyvips
    return _pyvips


def _decode_with_pyvips_from_buffer(data: bytes) -> np.ndarray:
    """Decode arbitrary image bytes into an RGB numpy array using pyvips."""
    pyvips = _get_pyvips_module()
    # Configure pyvips caches to avoid memory growth
    with contextlib.suppress(Exception):
        pyvips.cache_set_max(0)
        pyvips.cache_set_max_mem(0)

    image = pyvips.Image.new_from_buffer(data, "", access="sequential")

    with contextlib.suppress(Exception):
        image = image.colourspace("srgb")
    if image.hasalpha():
        image = image.flatten(background=[0, 0, 0])
    if image.bands > _RGB_CHANNELS:
        image = image.extract_band(0, n=_RGB_CHANNELS)
    elif image.bands < _RGB_CHANNELS:
        image = pyvips.Image.bandjoin([image] * _RGB_CHANNELS)
    if image.format != "uchar":
        image = image.cast("uchar")

    mem = image.write_to_memory()
    array = np.frombuffer(mem, dtype=np.uint8).reshape(image.height, image.width, image.bands)
    if array.shape[2] != _RGB_CHANNELS:
        raise RuntimeError(f"Unsupported band count after conversion: {array.shape[2]}")
    return array


def decode_blob(blob: FileBlob) -> tuple[str, np.ndarray | None, str | None]:
    """Decode a blob into an RGB numpy array.

    Returns (name, array|None, error|None).
    """
    if not blob.data:
        return blob.name, None, "empty file"
    try:
        array = _decode_with_pyvips_from_buffer(blob.data)
        return blob.name, array, None
    except Exception as e:
        _logger.debug("decode failed: %s: %s", blob.name, e)
        return blob.name, None, str(e)
