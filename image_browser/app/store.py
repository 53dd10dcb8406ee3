"""Ordered image collection and the current selection.

The store is the only owner of the collection, the selected index and the
zoom level. Every mutation runs under one lock and is followed by a single
``changed`` emission, so observers never see a half-applied batch.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass

from PySide6.QtCore import QObject, Signal, Slot

from image_browser.app.zoom import ZoomRange, percent_to_factor
from image_browser.image_engine.decoder import DecodeFailure, FileBlob, ImageHandle
from image_browser.image_engine.loader import BatchLoader, BatchOutcome
from image_browser.logger import get_logger

_logger = get_logger("store")

NO_SELECTION = -1


@dataclass(frozen=True)
class BatchResult:
    """What a settled batch did to the collection."""

    batch_id: int
    appended: int
    total: int
    failures: tuple[DecodeFailure, ...] = ()
    skipped: tuple[str, ...] = ()


@dataclass(frozen=True)
class ViewSnapshot:
    """Render-ready state polled by the presentation layer."""

    has_selection: bool
    current_image: ImageHandle | None
    index: int
    total: int
    zoom_percent: int

    @property
    def zoom_factor(self) -> float:
        return percent_to_factor(self.zoom_percent)


class ImageCollectionStore(QObject):
    changed = Signal()
    batch_ingested = Signal(object)  # BatchResult

    def __init__(
        self,
        loader: BatchLoader | None = None,
        zoom_range: ZoomRange | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._zoom_range = zoom_range if zoom_range is not None else ZoomRange()
        self._images: list[ImageHandle] = []
        self._index: int | None = None
        self._zoom_percent = self._zoom_range.baseline
        self._mutex = threading.RLock()
        self._loader = loader if loader is not None else BatchLoader(parent=self)
        self._loader.batch_settled.connect(self._on_batch_settled)

    # ---- read side ---------------------------------------------------------
    def __len__(self) -> int:
        return len(self._images)

    @property
    def loader(self) -> BatchLoader:
        return self._loader

    @property
    def zoom_range(self) -> ZoomRange:
        return self._zoom_range

    @property
    def index(self) -> int | None:
        return self._index

    @property
    def zoom_percent(self) -> int:
        return self._zoom_percent

    def images(self) -> tuple[ImageHandle, ...]:
        with self._mutex:
            return tuple(self._images)

    def current_image(self) -> ImageHandle | None:
        with self._mutex:
            if self._index is None:
                return None
            return self._images[self._index]

    def snapshot(self) -> ViewSnapshot:
        with self._mutex:
            current = None if self._index is None else self._images[self._index]
            return ViewSnapshot(
                has_selection=current is not None,
                current_image=current,
                index=NO_SELECTION if self._index is None else self._index,
                total=len(self._images),
                zoom_percent=self._zoom_percent,
            )

    # ---- ingestion -----------------------------------------------------------
    def ingest_batch(self, blobs: Iterable[FileBlob]) -> int:
        """Queue a batch for decoding; the result arrives via ``batch_ingested``."""
        return self._loader.submit_batch(list(blobs))

    @Slot(object)
    def _on_batch_settled(self, outcome: BatchOutcome) -> None:
        self.commit_batch(outcome)

    def commit_batch(self, outcome: BatchOutcome) -> BatchResult:
        with self._mutex:
            was_empty = not self._images
            self._images.extend(outcome.handles)
            if was_empty and self._images:
                self._index = 0
            self._clamp_index()
            result = BatchResult(
                batch_id=outcome.batch_id,
                appended=len(outcome.handles),
                total=len(self._images),
                failures=outcome.failures,
                skipped=outcome.skipped,
            )
        if result.failures:
            _logger.warning(
                "batch %s: %s file(s) failed to decode: %s",
                result.batch_id,
                len(result.failures),
                ", ".join(f.name for f in result.failures),
            )
        _logger.debug("batch committed: id=%s appended=%s total=%s", result.batch_id, result.appended, result.total)
        if result.appended:
            self.changed.emit()
        self.batch_ingested.emit(result)
        return result

    def _clamp_index(self) -> None:
        # Keep the index valid whenever the collection length changes.
        if not self._images:
            self._index = None
        elif self._index is not None:
            self._index = max(0, min(self._index, len(self._images) - 1))

    # ---- navigation ----------------------------------------------------------
    def select_next(self) -> bool:
        return self._step(1)

    def select_previous(self) -> bool:
        return self._step(-1)

    def _step(self, delta: int) -> bool:
        with self._mutex:
            if self._index is None:
                _logger.debug("navigation ignored: collection is empty")
                return False
            self._index = (self._index + delta) % len(self._images)
        self.changed.emit()
        return True

    # ---- zoom ------------------------------------------------------------------
    def zoom_in(self) -> int:
        return self._update_zoom(self._zoom_range.zoom_in)

    def zoom_out(self) -> int:
        return self._update_zoom(self._zoom_range.zoom_out)

    def reset_zoom(self) -> int:
        return self._update_zoom(lambda _current: self._zoom_range.reset())

    def _update_zoom(self, compute) -> int:
        with self._mutex:
            if self._index is None:
                _logger.debug("zoom ignored: no current image")
                return self._zoom_percent
            value = self._zoom_range.clamp(compute(self._zoom_percent))
            if value == self._zoom_percent:
                return value
            self._zoom_percent = value
        self.changed.emit()
        return value

    def shutdown(self) -> None:
        self._loader.shutdown()
