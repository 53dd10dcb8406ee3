"""Read user-selected files into blobs for ingestion.

This is the file-picker side of the boundary: the core never touches the
file system itself.
"""

from __future__ import annotations

import mimetypes
from collections.abc import Iterable
from pathlib import Path

from image_browser.image_engine.decoder import FileBlob
from image_browser.logger import get_logger

_logger = get_logger("file_blobs")

# mimetypes misses a few formats on some platforms.
_EXTRA_TYPES = {
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".heic": "image/heic",
    ".heif": "image/heif",
}


def guess_media_type(path: str | Path) -> str:
    p = Path(path)
    media_type, _ = mimetypes.guess_type(p.name)
    if media_type is None:
        media_type = _EXTRA_TYPES.get(p.suffix.lower(), "application/octet-stream")
    return media_type


def load_file_blobs(paths: Iterable[str | Path]) -> list[FileBlob]:
    """Read each path in order; unreadable files are logged and left out."""
    blobs: list[FileBlob] = []
    for path in paths:
        p = Path(path)
        try:
            data = p.read_bytes()
        except OSError as e:
            _logger.warning("failed to read %s: %s", p, e)
            continue
        blobs.append(FileBlob(name=p.name, media_type=guess_media_type(p), data=data))
    return blobs
