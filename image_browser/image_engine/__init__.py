"""Image Engine - decoding and batch loading.

- Decoder adapter (decoder): blob bytes -> read-only RGB pixels
- Batch loader (loader): concurrent decodes committed behind a settle barrier

Usage:
    from image_browser.image_engine import BatchLoader

    loader = BatchLoader()
    loader.batch_settled.connect(on_batch_settled)
    loader.submit_batch(blobs)
"""

from .decoder import DecodeFailure, FileBlob, ImageHandle, decode_blob, is_image_media_type
from .loader import BatchLoader, BatchOutcome

__all__ = [
    "BatchLoader",
    "BatchOutcome",
    "DecodeFailure",
    "FileBlob",
    "ImageHandle",
    "decode_blob",
    "is_image_media_type",
]
